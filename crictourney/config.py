"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "crictourney.db")

    # Match defaults
    DEFAULT_OVERS: int = _get_env_int("DEFAULT_OVERS", 20)

    # Auto simulation: one ball every base interval, divided by the speed multiplier
    AUTO_SIM_BASE_INTERVAL: float = _get_env_int("AUTO_SIM_BASE_INTERVAL_MS", 1000) / 1000
    SIMULATION_SPEEDS: tuple = (0.5, 1, 2, 5)

    # Auction
    AUCTION_BUDGET: int = _get_env_int("AUCTION_BUDGET", 10000000)
    SQUAD_SIZE: int = _get_env_int("SQUAD_SIZE", 11)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Extra CORS origins (comma-separated)
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")


settings = Settings()
