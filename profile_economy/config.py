"""Application configuration management."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./profile_economy.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    log_dir: str = "logs"
    log_level: str = "INFO"

    # Store pricing
    flash_sale_multiplier: float = 0.5  # Hourly flash sale item
    first_purchase_multiplier: float = 0.8  # Account has never bought anything
    achievement_discount_step: float = 0.01  # Per owned achievement
    achievement_discount_cap: float = 0.10

    # Rewards (all values in whole XP / REP)
    mystery_box_cost: int = 120  # Spendable XP per draw
    check_in_xp: int = 10  # Flat experience per calendar-day check-in
    gift_claim_reward_percent: int = 10  # Share of gift cost credited to the recipient

    # Concurrency
    conflict_retry_attempts: int = 3

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate economy tuning values and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        for name in ("flash_sale_multiplier", "first_purchase_multiplier"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

        if self.achievement_discount_step < 0:
            raise ValueError("achievement_discount_step must not be negative")

        if not 0 <= self.achievement_discount_cap < 1:
            raise ValueError("achievement_discount_cap must be in [0, 1)")

        if self.mystery_box_cost < 1:
            raise ValueError("mystery_box_cost must be at least 1")

        if self.check_in_xp < 0:
            raise ValueError("check_in_xp must not be negative")

        if not 0 <= self.gift_claim_reward_percent <= 100:
            raise ValueError("gift_claim_reward_percent must be between 0 and 100")

        if self.conflict_retry_attempts < 1:
            raise ValueError("conflict_retry_attempts must be at least 1")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:  # pragma: no cover - defensive fallback
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            logger.warning("Invalid DATABASE_URL; falling back to default sqlite database.")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            old_drivername = drivername
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {old_drivername} -> {parsed.drivername}")

        # Use render_as_string to properly re-encode special characters in password
        self.database_url = parsed.render_as_string(hide_password=False)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
