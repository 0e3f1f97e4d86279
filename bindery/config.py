from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Bindery"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/bindery"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 10.0


settings = Settings()


# =============================================================================
# SLOT ENGINE CONSTANTS
# =============================================================================

# First transient index handed out during phase 1 of a commit.
# Placeholders count down from here so they never meet a committed index.
PLACEHOLDER_BASE = -1

# Pages are shown in two-page spreads, so page counts round up to this.
PAGES_PER_SPREAD = 2
