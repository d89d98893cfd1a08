"""
Unit tests for TokenVerifier.
"""

import pytest

from localtoken import TokenMetrics, TokenVerifier, VerificationResult
from localtoken.errors import DecryptError, TokenExpiredError, TokenParseError, UnrecognizedVariantError
from localtoken.variants import CellLocalAccessToken, PasswordChangeAccessToken, VisitorLocalAccessToken

from conftest import ISSUER, OTHER_ISSUER

NOW = 1700000001000


class TestVerify:
    """Tests for TokenVerifier.verify()."""

    def test_valid_token(self, visitor_token, cipher):
        result = TokenVerifier(cipher).verify(visitor_token.to_token_string(cipher), ISSUER, now=NOW)
        assert isinstance(result, VerificationResult)
        assert result.valid is True
        assert result.reason == "ok"
        assert result.token == visitor_token

    def test_expired_token(self, visitor_token, cipher):
        """An expired token is reported with the decoded token attached."""
        raw = visitor_token.to_token_string(cipher)
        result = TokenVerifier(cipher).verify(raw, ISSUER, now=visitor_token.expires_at)
        assert result.valid is False
        assert result.reason == "expired"
        assert result.token == visitor_token

    def test_clock_skew(self, visitor_token, cipher):
        raw = visitor_token.to_token_string(cipher)
        verifier = TokenVerifier(cipher, clock_skew_millis=1000)
        assert verifier.verify(raw, ISSUER, now=visitor_token.expires_at + 999).valid is True
        assert verifier.verify(raw, ISSUER, now=visitor_token.expires_at + 1000).valid is False

    def test_negative_skew_rejected(self, cipher):
        with pytest.raises(ValueError):
            TokenVerifier(cipher, clock_skew_millis=-1)

    @pytest.mark.parametrize(
        "raw,reason",
        [
            ("", "unrecognized_variant"),
            ("ZZ~abc", "unrecognized_variant"),
            ("AV~garbage", "decrypt_failed"),
        ],
    )
    def test_parse_failures(self, cipher, raw, reason):
        """Parse failures never raise and report their kind."""
        result = TokenVerifier(cipher).verify(raw, ISSUER, now=NOW)
        assert result.valid is False
        assert result.reason == reason
        assert result.token is None
        assert isinstance(result.error, TokenParseError)

    def test_wrong_issuer(self, visitor_token, cipher):
        result = TokenVerifier(cipher).verify(visitor_token.to_token_string(cipher), OTHER_ISSUER, now=NOW)
        assert result.reason == "decrypt_failed"

    def test_allowed_kinds(self, cipher):
        raw = PasswordChangeAccessToken(issued_at=NOW, lifespan=1000, issuer=ISSUER).to_token_string(cipher)
        verifier = TokenVerifier(cipher, allowed=[CellLocalAccessToken, VisitorLocalAccessToken])
        result = verifier.verify(raw, ISSUER, now=NOW)
        assert result.valid is False
        assert result.reason == "not_allowed"


class TestVerifyOrRaise:
    """Tests for TokenVerifier.verify_or_raise()."""

    def test_returns_token(self, visitor_token, cipher):
        raw = visitor_token.to_token_string(cipher)
        assert TokenVerifier(cipher).verify_or_raise(raw, ISSUER, now=NOW) == visitor_token

    def test_raises_parse_error(self, cipher):
        with pytest.raises(UnrecognizedVariantError):
            TokenVerifier(cipher).verify_or_raise("nope", ISSUER, now=NOW)
        with pytest.raises(DecryptError):
            TokenVerifier(cipher).verify_or_raise("AP~xxxx", ISSUER, now=NOW)

    def test_raises_expired(self, visitor_token, cipher):
        raw = visitor_token.to_token_string(cipher)
        with pytest.raises(TokenExpiredError):
            TokenVerifier(cipher).verify_or_raise(raw, ISSUER, now=visitor_token.expires_at + 1)

    def test_raises_not_allowed(self, visitor_token, cipher):
        raw = visitor_token.to_token_string(cipher)
        verifier = TokenVerifier(cipher, allowed=[PasswordChangeAccessToken])
        with pytest.raises(TokenParseError, match="not accepted"):
            verifier.verify_or_raise(raw, ISSUER, now=NOW)


class TestVerifierMetrics:
    """Verification outcomes are recorded when metrics are supplied."""

    def test_records_outcomes(self, visitor_token, cipher):
        metrics = TokenMetrics()
        verifier = TokenVerifier(cipher, metrics=metrics)
        raw = visitor_token.to_token_string(cipher)

        verifier.verify(raw, ISSUER, now=NOW)
        verifier.verify("AV~junk", ISSUER, now=NOW)
        verifier.verify(raw, ISSUER, now=visitor_token.expires_at)

        stats = metrics.get_stats()
        assert stats["verifications_success"] == 1
        assert stats["verifications_failure"] == 2
        assert stats["reason_decrypt_failed"] == 1
        assert stats["reason_expired"] == 1
        assert stats["verification_duration_count"] == 3
