from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DUELVAULT_")

    app_name: str = "DuelVault"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./duelvault.db"


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION RULES
# =============================================================================

# Standard copy limit for a single print inside one deck (main + extra + side)
MAX_COPIES_PER_DECK = 3

# Main deck below the minimum is surfaced as a warning only, never blocked
MAIN_DECK_MIN = 40
MAIN_DECK_MAX = 60

EXTRA_DECK_MAX = 15
SIDE_DECK_MAX = 15
