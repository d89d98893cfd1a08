"""
Unit tests for the payload cipher and key resolvers.
"""

import json
import re
import warnings

import pytest

from localtoken import IssuerKeyring, KeyConfig, PayloadCipher, StaticKeyResolver, generate_secret
from localtoken.errors import DecryptError, KeyResolutionError
from localtoken.keys import derive_issuer_key, secret_from_jwk

from conftest import ISSUER, OTHER_ISSUER


class TestPayloadCipher:
    """Tests for PayloadCipher encrypt/decrypt."""

    def test_round_trip(self, cipher):
        sealed = cipher.encrypt(ISSUER, "hello\tworld")
        assert cipher.decrypt(ISSUER, sealed) == "hello\tworld"

    def test_output_is_url_safe(self, cipher):
        """Ciphertext uses only the unpadded base64url alphabet."""
        sealed = cipher.encrypt(ISSUER, "x" * 100)
        assert re.fullmatch(r"[A-Za-z0-9_-]+", sealed)

    def test_random_nonce(self, cipher):
        """Sealing the same payload twice gives different ciphertexts."""
        assert cipher.encrypt(ISSUER, "same") != cipher.encrypt(ISSUER, "same")

    def test_wrong_issuer(self, cipher):
        """A payload sealed for one issuer does not open for another."""
        sealed = cipher.encrypt(ISSUER, "payload")
        with pytest.raises(DecryptError):
            cipher.decrypt(OTHER_ISSUER, sealed)

    def test_wrong_secret(self, cipher):
        sealed = cipher.encrypt(ISSUER, "payload")
        other = PayloadCipher(StaticKeyResolver.from_jwk(generate_secret()))
        with pytest.raises(DecryptError):
            other.decrypt(ISSUER, sealed)

    @pytest.mark.parametrize("garbage", ["", "!!!", "abc", "a" * 10, "not base64 at all"])
    def test_garbage(self, cipher, garbage):
        with pytest.raises(DecryptError):
            cipher.decrypt(ISSUER, garbage)

    def test_truncated(self, cipher):
        sealed = cipher.encrypt(ISSUER, "payload")
        with pytest.raises(DecryptError):
            cipher.decrypt(ISSUER, sealed[:-4])

    def test_errors_are_indistinguishable(self, cipher):
        """Wrong key and corrupted data produce the same error message."""
        sealed = cipher.encrypt(ISSUER, "payload")
        with pytest.raises(DecryptError) as wrong_key:
            cipher.decrypt(OTHER_ISSUER, sealed)
        corrupted = ("B" if sealed[5] == "A" else "A").join([sealed[:5], sealed[6:]])
        with pytest.raises(DecryptError) as bad_data:
            cipher.decrypt(ISSUER, corrupted)
        assert str(wrong_key.value) == str(bad_data.value)

    def test_unknown_issuer_on_decrypt_is_decrypt_error(self):
        """A keyring miss while parsing looks like any other decrypt failure."""
        ring = IssuerKeyring([KeyConfig(issuer=ISSUER, secret_jwk=generate_secret())])
        sealed = PayloadCipher(ring).encrypt(ISSUER, "payload")
        with pytest.raises(DecryptError):
            PayloadCipher(IssuerKeyring()).decrypt(ISSUER, sealed)

    def test_unknown_issuer_on_encrypt(self):
        """Issuing for an issuer with no key is a KeyResolutionError."""
        with pytest.raises(KeyResolutionError):
            PayloadCipher(IssuerKeyring()).encrypt(ISSUER, "payload")


class TestKeys:
    """Tests for secrets and key resolvers."""

    def test_generate_secret_is_oct_jwk(self):
        parsed = json.loads(generate_secret())
        assert parsed["kty"] == "oct"
        assert len(secret_from_jwk(generate_secret())) == 32

    def test_secret_from_jwk_emits_no_deprecation_warning(self):
        secret = generate_secret()
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            assert len(secret_from_jwk(secret)) == 32

    def test_secret_must_be_symmetric(self):
        from jwcrypto import jwk

        ec_key = jwk.JWK.generate(kty="EC", crv="P-256").export_private()
        with pytest.raises(ValueError, match="kty=oct"):
            secret_from_jwk(ec_key)

    def test_invalid_jwk(self):
        with pytest.raises(ValueError, match="Invalid JWK"):
            secret_from_jwk("not-json")

    def test_short_secret_rejected(self):
        with pytest.raises(ValueError):
            secret_from_jwk(generate_secret_of_bits(64))

    def test_keys_differ_per_issuer(self, resolver):
        assert resolver.resolve(ISSUER) != resolver.resolve(OTHER_ISSUER)
        assert len(resolver.resolve(ISSUER)) == 32

    def test_derivation_is_deterministic(self):
        master = b"m" * 32
        assert derive_issuer_key(master, ISSUER) == derive_issuer_key(master, ISSUER)

    def test_static_resolver_requires_issuer(self, resolver):
        with pytest.raises(KeyResolutionError):
            resolver.resolve("")

    def test_keyring_add_remove(self):
        ring = IssuerKeyring()
        ring.add_key(KeyConfig(issuer=ISSUER, secret_jwk=generate_secret(), key_id="k1"))
        assert ring.key_count == 1
        assert ring.key_id(ISSUER) == "k1"
        assert ring.issuers == [ISSUER]

        assert ring.remove_key(ISSUER) is True
        assert ring.remove_key(ISSUER) is False
        with pytest.raises(KeyResolutionError):
            ring.resolve(ISSUER)

    def test_keyring_rejects_bad_key(self):
        with pytest.raises(ValueError, match="index 0"):
            IssuerKeyring([KeyConfig(issuer=ISSUER, secret_jwk="{}")])


def generate_secret_of_bits(bits: int) -> str:
    from jwcrypto import jwk

    return jwk.JWK.generate(kty="oct", size=bits).export_symmetric()
