"""
Exceptions

Error types raised by the loss-chain and degradation models.
"""


class InvalidInputError(ValueError):
    """
    Raised when an input violates a model precondition.

    Covers negative irradiance, non-positive capacity, non-finite scalars
    and structurally malformed loss-chain configurations. These always
    reach the caller: physically implausible inputs are never clamped.
    """
