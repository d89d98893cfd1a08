# localtoken/config.py
"""
Centralized configuration for localtoken.

All configurable values are read from environment variables with sensible
defaults, so each deployment can tune token lifetimes and clock tolerance
without code changes. Secrets are never read here: key material reaches the
codec only through a KeyResolver.

Usage:
    from localtoken.config import ACCESS_TOKEN_EXPIRES_MILLIS

Environment Variables:
    LOCALTOKEN_ACCESS_EXPIRES_MILLIS: Default access token lifespan (default: 1 hour)
    LOCALTOKEN_REFRESH_EXPIRES_MILLIS: Default refresh token lifespan (default: 24 hours)
    LOCALTOKEN_GRANT_CODE_EXPIRES_MILLIS: Default grant code lifespan (default: 10 minutes)
    LOCALTOKEN_CLOCK_SKEW_MILLIS: Tolerance applied when checking expiry (default: 0)
"""

import os
from typing import Final

# =============================================================================
# Token Lifespans
# =============================================================================

ACCESS_TOKEN_EXPIRES_MILLIS: Final[int] = int(
    os.getenv("LOCALTOKEN_ACCESS_EXPIRES_MILLIS", str(60 * 60 * 1000))
)

REFRESH_TOKEN_EXPIRES_MILLIS: Final[int] = int(
    os.getenv("LOCALTOKEN_REFRESH_EXPIRES_MILLIS", str(24 * 60 * 60 * 1000))
)

GRANT_CODE_EXPIRES_MILLIS: Final[int] = int(
    os.getenv("LOCALTOKEN_GRANT_CODE_EXPIRES_MILLIS", str(10 * 60 * 1000))
)

# =============================================================================
# Verification
# =============================================================================

# Tokens are still accepted this many milliseconds after expires_at
CLOCK_SKEW_MILLIS: Final[int] = int(os.getenv("LOCALTOKEN_CLOCK_SKEW_MILLIS", "0"))

# =============================================================================
# CLI
# =============================================================================

# Environment variable the CLI reads the master secret (oct JWK) from
SECRET_ENV_VAR: Final[str] = "LOCALTOKEN_SECRET"


def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("localtoken configuration:")
    print(f"  ACCESS_TOKEN_EXPIRES_MILLIS:  {ACCESS_TOKEN_EXPIRES_MILLIS}")
    print(f"  REFRESH_TOKEN_EXPIRES_MILLIS: {REFRESH_TOKEN_EXPIRES_MILLIS}")
    print(f"  GRANT_CODE_EXPIRES_MILLIS:    {GRANT_CODE_EXPIRES_MILLIS}")
    print(f"  CLOCK_SKEW_MILLIS:            {CLOCK_SKEW_MILLIS}")


if __name__ == "__main__":
    print_config()
