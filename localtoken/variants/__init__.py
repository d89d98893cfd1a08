"""
Concrete local token variants.

Listed in dispatch priority order.
"""

from .cell_local import CellLocalAccessToken
from .visitor import VisitorLocalAccessToken
from .password_change import PasswordChangeAccessToken
from .unit_local import UnitLocalUnitUserToken
from .refresh import CellLocalRefreshToken, VisitorRefreshToken
from .grant_code import GrantCode

ALL_VARIANTS = (
    CellLocalAccessToken,
    VisitorLocalAccessToken,
    PasswordChangeAccessToken,
    UnitLocalUnitUserToken,
    CellLocalRefreshToken,
    VisitorRefreshToken,
    GrantCode,
)

__all__ = [
    "ALL_VARIANTS",
    "CellLocalAccessToken",
    "VisitorLocalAccessToken",
    "PasswordChangeAccessToken",
    "UnitLocalUnitUserToken",
    "CellLocalRefreshToken",
    "VisitorRefreshToken",
    "GrantCode",
]
