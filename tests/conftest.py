"""
Shared pytest fixtures for localtoken tests.
"""

import pytest

from localtoken import PayloadCipher, Role, StaticKeyResolver, VisitorLocalAccessToken, generate_secret
from localtoken.keys import KeyResolver

ISSUER = "https://cell.example/"
OTHER_ISSUER = "https://other-cell.example/"


class CountingResolver(KeyResolver):
    """Key resolver that records every issuer it is asked about."""

    def __init__(self, inner: KeyResolver):
        self.inner = inner
        self.calls = []

    def resolve(self, issuer: str) -> bytes:
        self.calls.append(issuer)
        return self.inner.resolve(issuer)


@pytest.fixture
def issuer() -> str:
    return ISSUER


@pytest.fixture
def secret() -> str:
    """A fresh master secret (oct JWK JSON)."""
    return generate_secret()


@pytest.fixture
def resolver(secret: str) -> StaticKeyResolver:
    return StaticKeyResolver.from_jwk(secret)


@pytest.fixture
def cipher(resolver: StaticKeyResolver) -> PayloadCipher:
    """Create a PayloadCipher backed by a fresh secret."""
    return PayloadCipher(resolver)


@pytest.fixture
def counting_resolver(resolver: StaticKeyResolver) -> CountingResolver:
    return CountingResolver(resolver)


@pytest.fixture
def admin_role() -> Role:
    return Role(name="admin", url="https://cell.example/__role/admin")


@pytest.fixture
def visitor_token(admin_role: Role) -> VisitorLocalAccessToken:
    """The reference visitor access token."""
    return VisitorLocalAccessToken(
        issued_at=1700000000000,
        lifespan=3600000,
        issuer=ISSUER,
        subject="user1",
        roles=[admin_role],
        schema=None,
    )
