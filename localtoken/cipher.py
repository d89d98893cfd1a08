"""
Symmetric payload cipher.

Payloads are sealed with AES-256-GCM under the key resolved for the token's
issuer. The issuer is also bound as associated data, so a payload sealed for
one cell never opens under another. The output is

    base64url(nonce || ciphertext || tag)

without padding, which keeps tokens safe in headers and URLs.
"""

import logging
import os
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from jwcrypto.common import base64url_decode, base64url_encode

from localtoken.errors import DecryptError, KeyResolutionError
from localtoken.keys import KeyResolver

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16

_ALPHABET = re.compile(r"[A-Za-z0-9_-]+")


class PayloadCipher:
    """
    Encrypts and decrypts token payloads per issuer.

    Example:
        >>> cipher = PayloadCipher(StaticKeyResolver.from_jwk(generate_secret()))
        >>> sealed = cipher.encrypt("https://cell.example/", "payload")
        >>> cipher.decrypt("https://cell.example/", sealed)
        'payload'
    """

    def __init__(self, key_resolver: KeyResolver):
        self._resolver = key_resolver

    def encrypt(self, issuer: str, plaintext: str) -> str:
        """
        Seal plaintext for issuer.

        Raises:
            KeyResolutionError: If no key is available for issuer.
        """
        key = self._resolver.resolve(issuer)
        nonce = os.urandom(NONCE_SIZE)
        sealed = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), issuer.encode("utf-8"))
        return base64url_encode(nonce + sealed)

    def decrypt(self, issuer: str, ciphertext: str) -> str:
        """
        Open a payload sealed for issuer.

        Every failure, including an unknown issuer, raises the same
        DecryptError.
        """
        if not _ALPHABET.fullmatch(ciphertext):
            raise DecryptError()
        try:
            raw = base64url_decode(ciphertext)
        except ValueError:
            raise DecryptError() from None
        # Reject non-canonical encodings (stray bits in the last character)
        if len(raw) < NONCE_SIZE + TAG_SIZE or base64url_encode(raw) != ciphertext:
            raise DecryptError()

        try:
            key = self._resolver.resolve(issuer)
            plain = AESGCM(key).decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], issuer.encode("utf-8"))
            return plain.decode("utf-8")
        except (KeyResolutionError, InvalidTag, UnicodeDecodeError):
            logger.debug("Payload rejected by cipher")
            raise DecryptError() from None
