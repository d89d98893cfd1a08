"""Password change access token (prefix ``AP~``)."""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from localtoken import config
from localtoken.token import LocalToken


@dataclass(frozen=True)
class PasswordChangeAccessToken(LocalToken):
    """
    Short-lived token that only authorizes changing an account's password.

    Carries no extension fields: issued_at, lifespan, subject, schema and
    issuer fully describe it.
    """

    PREFIX: ClassVar[str] = "AP~"
    KIND: ClassVar[str] = "password_change"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ()
    DEFAULT_LIFESPAN: ClassVar[int] = config.ACCESS_TOKEN_EXPIRES_MILLIS

    @classmethod
    def with_default_lifespan(
        cls,
        issued_at: int,
        issuer: str,
        subject: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> "PasswordChangeAccessToken":
        return cls(
            issued_at=issued_at,
            lifespan=cls.DEFAULT_LIFESPAN,
            issuer=issuer,
            subject=subject,
            schema=schema,
        )
