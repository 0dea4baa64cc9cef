from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SEKAIDECK_")

    app_name: str = "sekaideck"
    debug: bool = False

    # Source of the game's master data tables (one JSON file per table)
    master_data_url: str = "https://raw.githubusercontent.com/Sekai-World/sekai-master-db-diff/main"

    # Local copy of master data written by the download job
    data_dir: Path = Path("data/master")

    # Exported user data (userCards, userCharacters, userAreas, userHonors)
    user_data_file: Path = Path("data/user.json")

    # World bloom support deck size
    support_deck_size: int = 20


settings = Settings()


# =============================================================================
# SEARCH LIMITS
# =============================================================================

# Deck member count bounds
MIN_MEMBER_COUNT = 2
MAX_MEMBER_COUNT = 5
DEFAULT_MEMBER_COUNT = 5

# Bonus-target search returns at most this many distinct bonus values
MAX_BONUS_RESULTS = 100

# Tolerance when matching a specific bonus value (absorbs summation error)
BONUS_MATCH_TOLERANCE = 0.001

# Decimal places kept on a deck's event bonus so equal bonuses compare exactly
BONUS_PRECISION = 6

# Default number of decks returned by best-deck search
DEFAULT_RESULT_LIMIT = 10
