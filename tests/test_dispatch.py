"""
Unit tests for token type dispatch.
"""

from dataclasses import dataclass
from typing import ClassVar

import pytest

from localtoken import PayloadCipher, TokenRegistry, detect_variant, parse_token
from localtoken.errors import DecryptError, MalformedPrefixError, UnrecognizedVariantError
from localtoken.token import LocalToken
from localtoken.variants import (
    ALL_VARIANTS,
    CellLocalAccessToken,
    PasswordChangeAccessToken,
    VisitorLocalAccessToken,
)

from conftest import ISSUER, OTHER_ISSUER, CountingResolver


class TestRegistration:
    """Tests for TokenRegistry.register()."""

    def test_defaults_hold_all_variants_in_order(self):
        assert TokenRegistry.with_defaults().variants == list(ALL_VARIANTS)

    def test_duplicate_prefix_rejected(self):
        registry = TokenRegistry([VisitorLocalAccessToken])

        @dataclass(frozen=True)
        class Impostor(LocalToken):
            PREFIX: ClassVar[str] = "AV~"

        with pytest.raises(ValueError, match="collides"):
            registry.register(Impostor)

    def test_overlapping_prefix_rejected(self):
        """A prefix that starts another prefix would make dispatch ambiguous."""
        registry = TokenRegistry([VisitorLocalAccessToken])

        @dataclass(frozen=True)
        class Short(LocalToken):
            PREFIX: ClassVar[str] = "AV"

        with pytest.raises(ValueError, match="collides"):
            registry.register(Short)

    def test_missing_prefix_rejected(self):
        with pytest.raises(ValueError, match="PREFIX"):
            TokenRegistry([LocalToken])

    def test_variant_for_kind(self):
        registry = TokenRegistry.with_defaults()
        assert registry.variant_for_kind("password_change") is PasswordChangeAccessToken
        with pytest.raises(KeyError):
            registry.variant_for_kind("nope")


class TestDispatch:
    """Tests for detect_variant() and parse()."""

    def test_detect(self, visitor_token, cipher):
        assert detect_variant(visitor_token.to_token_string(cipher)) is VisitorLocalAccessToken

    @pytest.mark.parametrize("raw", ["", "XX~abc", "av~abc", "AV", None, 42])
    def test_unrecognized(self, raw):
        """Unknown prefixes raise UnrecognizedVariantError."""
        with pytest.raises(UnrecognizedVariantError):
            detect_variant(raw)

    def test_unrecognized_is_a_prefix_error(self):
        with pytest.raises(MalformedPrefixError):
            detect_variant("ZZ~")

    def test_parse_routes_to_variant(self, visitor_token, cipher):
        parsed = parse_token(visitor_token.to_token_string(cipher), ISSUER, cipher)
        assert parsed == visitor_token

    def test_unrecognized_touches_no_key(self, resolver):
        counting = CountingResolver(resolver)
        with pytest.raises(UnrecognizedVariantError):
            parse_token("QQ~AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", ISSUER, PayloadCipher(counting))
        assert counting.calls == []

    def test_failure_does_not_fall_through(self, cipher, resolver):
        """A matched prefix that fails to parse is not retried as another kind."""
        raw = CellLocalAccessToken(issued_at=1, lifespan=1, issuer=ISSUER).to_token_string(cipher)
        counting = CountingResolver(resolver)
        with pytest.raises(DecryptError):
            parse_token(raw, OTHER_ISSUER, PayloadCipher(counting))
        assert counting.calls == [OTHER_ISSUER]
