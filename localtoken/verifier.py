"""
Point-of-use token verification.

Parsing proves a token was sealed by the holder of the issuer's key; it says
nothing about whether the token is still valid. TokenVerifier combines
dispatch, parsing and an expiry check under a configurable clock skew, and
reports the outcome as a VerificationResult instead of raising.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Type

from localtoken import config
from localtoken.cipher import PayloadCipher
from localtoken.dispatch import TokenRegistry, default_registry
from localtoken.errors import TokenExpiredError, TokenParseError
from localtoken.metrics import TokenMetrics
from localtoken.token import LocalToken, now_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying one token string."""

    valid: bool
    """Whether the token may be accepted."""

    reason: str
    """'ok', 'expired', 'not_allowed', or the kind of parse failure."""

    token: Optional[LocalToken] = None
    """The decoded token, present whenever decoding succeeded."""

    error: Optional[Exception] = None
    """The exception behind a failure, for audit logging."""


class TokenVerifier:
    """
    Verifies local tokens for one deployment.

    Example:
        >>> verifier = TokenVerifier(cipher, clock_skew_millis=5000)
        >>> result = verifier.verify(raw_token, issuer="https://cell.example/")
        >>> if not result.valid:
        ...     reject(result.reason)
    """

    def __init__(
        self,
        cipher: PayloadCipher,
        clock_skew_millis: int = config.CLOCK_SKEW_MILLIS,
        registry: Optional[TokenRegistry] = None,
        metrics: Optional[TokenMetrics] = None,
        allowed: Optional[Iterable[Type[LocalToken]]] = None,
    ):
        """
        Args:
            cipher: Cipher holding the key resolver for trusted issuers.
            clock_skew_millis: How long after expires_at a token is still accepted.
            registry: Variants to dispatch to (defaults to all built-in variants).
            metrics: Optional metrics collector.
            allowed: If given, only these variants are accepted.
        """
        if clock_skew_millis < 0:
            raise ValueError("clock_skew_millis must be >= 0")
        self._cipher = cipher
        self._skew = clock_skew_millis
        self._registry = registry or default_registry()
        self._metrics = metrics
        self._allowed = tuple(allowed) if allowed is not None else None

    def verify(self, token: str, issuer: str, now: Optional[int] = None) -> VerificationResult:
        """Verify token as issued by issuer, at time now (epoch millis)."""
        if self._metrics:
            with self._metrics.verification_timer():
                result = self._verify(token, issuer, now)
            self._metrics.record_verification(result.valid, result.reason)
            return result
        return self._verify(token, issuer, now)

    def _verify(self, token: str, issuer: str, now: Optional[int]) -> VerificationResult:
        try:
            parsed = self._registry.parse(token, issuer, self._cipher)
        except TokenParseError as e:
            logger.debug(f"Token rejected: {e.kind}")
            return VerificationResult(False, e.kind, error=e)

        if self._allowed is not None and not isinstance(parsed, self._allowed):
            logger.debug(f"Token kind {parsed.KIND} not allowed here")
            return VerificationResult(False, "not_allowed", token=parsed)

        current = now if now is not None else now_millis()
        if parsed.is_expired(current, self._skew):
            logger.debug(f"Token {parsed.KIND} expired at {parsed.expires_at}")
            return VerificationResult(False, "expired", token=parsed)

        return VerificationResult(True, "ok", token=parsed)

    def verify_or_raise(self, token: str, issuer: str, now: Optional[int] = None) -> LocalToken:
        """
        Verify token and return it, raising on any failure.

        Raises:
            TokenParseError: If the token cannot be decoded or its kind is not allowed.
            TokenExpiredError: If the token has expired.
        """
        result = self.verify(token, issuer, now)
        if result.valid:
            return result.token
        if result.error is not None:
            raise result.error
        if result.reason == "expired":
            raise TokenExpiredError(f"Token expired at {result.token.expires_at}")
        raise TokenParseError(f"Token kind {result.token.KIND} is not accepted")
