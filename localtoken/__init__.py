"""
localtoken - self-contained, symmetric-key protected cell tokens.

Tokens are printable strings that the issuing cell (or anyone holding its
key) can decode and validate without any server-side session storage.
"""

__version__ = "1.0.0"

# Core codec
from .cipher import PayloadCipher
from .keys import KeyResolver, StaticKeyResolver, IssuerKeyring, KeyConfig, generate_secret
from .roles import Role, encode_roles, decode_roles
from .token import LocalToken, CommonFields, build_token_string, parse_common

# Variants and dispatch
from .variants import (
    CellLocalAccessToken,
    VisitorLocalAccessToken,
    PasswordChangeAccessToken,
    UnitLocalUnitUserToken,
    CellLocalRefreshToken,
    VisitorRefreshToken,
    GrantCode,
)
from .dispatch import TokenRegistry, default_registry, detect_variant, parse_token

# Errors
from .errors import (
    LocalTokenError,
    KeyResolutionError,
    FieldValueError,
    MalformedReferenceError,
    TokenExpiredError,
    TokenParseError,
    MalformedPrefixError,
    UnrecognizedVariantError,
    DecryptError,
    FieldCountError,
    NumericFieldError,
)


def __getattr__(name):
    """Lazy loading of verification and metrics helpers."""
    if name in ("TokenVerifier", "VerificationResult"):
        from . import verifier

        return getattr(verifier, name)
    elif name in ("TokenMetrics", "get_metrics"):
        from . import metrics

        return getattr(metrics, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "PayloadCipher",
    "KeyResolver",
    "StaticKeyResolver",
    "IssuerKeyring",
    "KeyConfig",
    "generate_secret",
    "Role",
    "encode_roles",
    "decode_roles",
    "LocalToken",
    "CommonFields",
    "build_token_string",
    "parse_common",
    "CellLocalAccessToken",
    "VisitorLocalAccessToken",
    "PasswordChangeAccessToken",
    "UnitLocalUnitUserToken",
    "CellLocalRefreshToken",
    "VisitorRefreshToken",
    "GrantCode",
    "TokenRegistry",
    "default_registry",
    "detect_variant",
    "parse_token",
    "TokenVerifier",
    "VerificationResult",
    "TokenMetrics",
    "get_metrics",
    "LocalTokenError",
    "KeyResolutionError",
    "FieldValueError",
    "MalformedReferenceError",
    "TokenExpiredError",
    "TokenParseError",
    "MalformedPrefixError",
    "UnrecognizedVariantError",
    "DecryptError",
    "FieldCountError",
    "NumericFieldError",
]
