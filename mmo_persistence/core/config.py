import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Tuple
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_game_config() -> Dict[str, Any]:
    """Load persistence defaults from config.yml"""
    config_path = Path(os.getenv("PERSISTENCE_CONFIG", "/app/config.yml"))
    if not config_path.exists():
        # Fallback to relative path for development
        config_path = Path("config.yml")

    if config_path.exists():
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


# Load game config from YAML
game_config = load_game_config()
persistence_config = game_config.get("persistence", {})

Vector = Tuple[float, float, float]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database settings
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", "postgresql+asyncpg://mmo:mmopassword@db:5432/mmo"
    )
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "").lower() in ("true", "1", "yes")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Character settings from config.yml with fallbacks
    MAX_LEVEL: int = int(
        os.getenv("MAX_LEVEL", str(persistence_config.get("max_level", 100)))
    )
    DEFAULT_INVENTORY_SIZE: int = int(
        os.getenv(
            "DEFAULT_INVENTORY_SIZE",
            str(persistence_config.get("inventory_size", 30)),
        )
    )

    # World settings
    START_POSITIONS: List[Vector] = [
        tuple(p) for p in persistence_config.get("start_positions", [[0.0, 0.0, 0.0]])
    ]
    WORLD_BOUNDS_MIN: Vector = tuple(
        persistence_config.get("world_bounds", {}).get("min", [-1000.0, -100.0, -1000.0])
    )
    WORLD_BOUNDS_MAX: Vector = tuple(
        persistence_config.get("world_bounds", {}).get("max", [1000.0, 500.0, 1000.0])
    )

    @model_validator(mode="after")
    def validate_world(self) -> "Settings":
        """A character with an invalid position needs somewhere to go."""
        if not self.START_POSITIONS:
            raise ValueError(
                "START_POSITIONS must contain at least one start position. "
                "Add one under persistence.start_positions in config.yml."
            )
        if any(lo > hi for lo, hi in zip(self.WORLD_BOUNDS_MIN, self.WORLD_BOUNDS_MAX)):
            raise ValueError("WORLD_BOUNDS_MIN must not exceed WORLD_BOUNDS_MAX")
        return self


settings = Settings()
