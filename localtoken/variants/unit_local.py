"""Unit local unit-user token (prefix ``AU~``)."""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from localtoken import config
from localtoken.token import LocalToken


@dataclass(frozen=True)
class UnitLocalUnitUserToken(LocalToken):
    """
    Token issued by the unit (not a cell) to a unit user.

    The issuer is the unit URL and the subject is the unit user that owns
    cells on it. There is no originating cell.
    """

    PREFIX: ClassVar[str] = "AU~"
    KIND: ClassVar[str] = "unit_user"
    EXTENSION_FIELDS: ClassVar[Tuple[str, ...]] = ()
    DEFAULT_LIFESPAN: ClassVar[int] = config.ACCESS_TOKEN_EXPIRES_MILLIS

    @property
    def ext_cell_url(self) -> Optional[str]:
        return None
