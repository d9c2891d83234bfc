class BLSError(Exception):
    """
    Base class for all blssig errors.

    This exception serves as the root of the blssig error hierarchy.
    """
    pass


class InvalidParameterError(BLSError):
    """
    Raised when a provided parameter is invalid or malformed.

    Examples include a byte string of the wrong length, unparsable hex,
    an empty list passed to aggregation, or mismatched list lengths in
    batch verification.
    """
    pass


class InvalidPrivateKeyError(BLSError):
    """
    Raised when a private key cannot be normalized to 0 < key < r.
    """
    pass


class InvalidPointError(BLSError):
    """
    Raised when a point is not on its curve or not in the prime-order subgroup.

    Also raised for coordinates that are not canonical field elements and
    for pairings requested at the point at infinity.
    """
    pass


class MathError(BLSError):
    """
    Raised for unrecoverable arithmetic failures.

    Examples include a message expansion that needs more than 255 hash
    blocks.
    """
    pass


class NonResidueError(MathError):
    """
    Raised when a square root is requested of a quadratic non-residue.
    """
    pass


class ConfigurationError(BLSError):
    """
    Raised when the domain separation tag or a provider is misconfigured.
    """
    pass
