"""
Exception hierarchy for local token issuance and parsing.

Every failure while decoding a token is a ``TokenParseError`` so callers can
reject a credential with a single ``except`` clause, while the subclasses let
audit logging record what kind of failure occurred.
"""

from typing import Optional


class LocalTokenError(Exception):
    """Base class for all localtoken errors."""


class KeyResolutionError(LocalTokenError):
    """No secret is available for the requested issuer (issuance side)."""


class FieldValueError(LocalTokenError, ValueError):
    """A field value cannot be serialized (it contains the field delimiter)."""


class MalformedReferenceError(LocalTokenError, ValueError):
    """A role reference is not a well-formed URL."""

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


class TokenExpiredError(LocalTokenError):
    """A token decoded cleanly but its lifespan has elapsed."""


class TokenParseError(LocalTokenError):
    """A token string could not be decoded into a token."""

    kind = "parse_failed"


class MalformedPrefixError(TokenParseError):
    """The token does not start with the expected variant prefix."""

    kind = "malformed_prefix"


class UnrecognizedVariantError(MalformedPrefixError):
    """No registered variant claims the token's prefix."""

    kind = "unrecognized_variant"


class DecryptError(TokenParseError):
    """
    The ciphertext could not be decrypted under the issuer's key.

    Deliberately carries no detail: wrong key, truncation and tampering all
    look the same to the caller.
    """

    kind = "decrypt_failed"

    def __init__(self, message: str = "Token could not be decrypted"):
        super().__init__(message)


class FieldCountError(TokenParseError):
    """The decrypted payload has the wrong number of fields."""

    kind = "field_count"

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected {expected} token fields, got {actual}")
        self.expected = expected
        self.actual = actual


class NumericFieldError(TokenParseError):
    """A numeric field is not a valid non-negative integer."""

    kind = "numeric_field"

    def __init__(self, field: str):
        super().__init__(f"Field '{field}' is not a valid non-negative integer")
        self.field = field
