"""
Issuer key resolution.

The codec never stores or loads secrets itself. It asks a KeyResolver for the
symmetric key belonging to an issuer and trusts the answer. Two resolvers are
provided: one deriving per-issuer keys from a single unit-wide master secret,
and an explicit keyring of per-issuer secrets.

Secrets are exchanged as symmetric JWKs (kty=oct) so they can be generated,
stored and passed around with standard JOSE tooling.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from jwcrypto import jwk
from jwcrypto.common import base64url_decode

from localtoken.errors import KeyResolutionError

logger = logging.getLogger(__name__)

KEY_SIZE_BYTES = 32
MIN_SECRET_BYTES = 16


def generate_secret(size_bits: int = 256) -> str:
    """
    Generate a fresh symmetric secret.

    Returns:
        JWK JSON string (kty=oct).
    """
    return jwk.JWK.generate(kty="oct", size=size_bits).export_symmetric()


def secret_from_jwk(secret_jwk: str) -> bytes:
    """
    Extract raw key bytes from an oct JWK JSON string.

    Raises:
        ValueError: If the JWK is invalid, not symmetric, or too short.
    """
    try:
        key = jwk.JWK.from_json(secret_jwk)
    except Exception as e:
        raise ValueError(f"Invalid JWK secret: {e}")

    if key["kty"] != "oct":
        raise ValueError("Secret must be a symmetric key (kty=oct)")

    raw = base64url_decode(json.loads(key.export_symmetric())["k"])
    if len(raw) < MIN_SECRET_BYTES:
        raise ValueError(f"Secret must be at least {MIN_SECRET_BYTES} bytes")
    return raw


def derive_issuer_key(master_secret: bytes, issuer: str) -> bytes:
    """Derive a 256-bit key bound to one issuer with HKDF-SHA256."""
    return HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE_BYTES,
        salt=None,
        info=issuer.encode("utf-8"),
    ).derive(master_secret)


class KeyResolver(ABC):
    """Abstract interface for looking up an issuer's symmetric key."""

    @abstractmethod
    def resolve(self, issuer: str) -> bytes:
        """
        Return the 32-byte key for issuer.

        Raises:
            KeyResolutionError: If no key is known for issuer.
        """
        pass


class StaticKeyResolver(KeyResolver):
    """
    Derives every issuer's key from one master secret.

    Suitable for a single unit where all cells share one deployment secret.

    Example:
        >>> resolver = StaticKeyResolver.from_jwk(generate_secret())
        >>> key = resolver.resolve("https://cell.example/")
    """

    def __init__(self, master_secret: bytes):
        if len(master_secret) < MIN_SECRET_BYTES:
            raise ValueError(f"Master secret must be at least {MIN_SECRET_BYTES} bytes")
        self._master = bytes(master_secret)

    @classmethod
    def from_jwk(cls, secret_jwk: str) -> "StaticKeyResolver":
        return cls(secret_from_jwk(secret_jwk))

    def resolve(self, issuer: str) -> bytes:
        if not issuer:
            raise KeyResolutionError("Issuer is required to resolve a key")
        return derive_issuer_key(self._master, issuer)


@dataclass
class KeyConfig:
    """
    Configuration for one issuer's secret.

    Attributes:
        issuer: Issuer URL the secret belongs to
        secret_jwk: JWK JSON string of the symmetric secret
        key_id: Optional identifier for this key
    """

    issuer: str
    secret_jwk: str
    key_id: Optional[str] = None


class IssuerKeyring(KeyResolver):
    """
    Explicit per-issuer secrets.

    The stored secret is not used directly; it is passed through the same
    HKDF derivation as StaticKeyResolver so the issuer is always bound into
    the key.

    Example:
        >>> ring = IssuerKeyring([KeyConfig(issuer="https://a.example/", secret_jwk=generate_secret())])
        >>> ring.resolve("https://a.example/")
    """

    def __init__(self, keys: Optional[List[KeyConfig]] = None):
        self._secrets: Dict[str, bytes] = {}
        self._key_ids: Dict[str, Optional[str]] = {}
        self._lock = threading.RLock()
        for i, key_config in enumerate(keys or []):
            try:
                self.add_key(key_config)
            except ValueError as e:
                raise ValueError(f"Invalid key at index {i}: {e}")

    def add_key(self, key_config: KeyConfig) -> None:
        """Add or replace the secret for an issuer."""
        if not key_config.issuer:
            raise ValueError("KeyConfig requires an issuer")
        secret = secret_from_jwk(key_config.secret_jwk)
        with self._lock:
            self._secrets[key_config.issuer] = secret
            self._key_ids[key_config.issuer] = key_config.key_id
        logger.info(f"Added key {key_config.key_id} for issuer {key_config.issuer}")

    def remove_key(self, issuer: str) -> bool:
        """
        Remove the secret for an issuer.

        Returns:
            True if a secret was found and removed, False otherwise.
        """
        with self._lock:
            if issuer in self._secrets:
                del self._secrets[issuer]
                self._key_ids.pop(issuer, None)
                logger.info(f"Removed key for issuer {issuer}")
                return True
            return False

    def key_id(self, issuer: str) -> Optional[str]:
        with self._lock:
            return self._key_ids.get(issuer)

    def resolve(self, issuer: str) -> bytes:
        with self._lock:
            secret = self._secrets.get(issuer)
        if secret is None:
            raise KeyResolutionError(f"No key configured for issuer {issuer}")
        return derive_issuer_key(secret, issuer)

    @property
    def issuers(self) -> List[str]:
        with self._lock:
            return list(self._secrets)

    @property
    def key_count(self) -> int:
        """Number of issuers with a configured key."""
        return len(self._secrets)
