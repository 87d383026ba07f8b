"""Configuration management with environment variable support."""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal


def _env_bool(name: str, default: str) -> bool:
    """Parse a boolean environment variable."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class TableConfig:
    """Default table rules and wallet seed."""

    deck_count: int = field(default_factory=lambda: int(os.getenv("BLACKJACK_DECKS", "6")))
    reshuffle_threshold: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_RESHUFFLE_THRESHOLD", "52"))
    )
    dealer_hits_soft_17: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_DEALER_HITS_SOFT_17", "true")
    )
    max_dealer_draws: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_MAX_DEALER_DRAWS", "10"))
    )
    starting_balance: Decimal = field(
        default_factory=lambda: Decimal(os.getenv("BLACKJACK_STARTING_BALANCE", "1000"))
    )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(
        default_factory=lambda: os.getenv("BLACKJACK_LOG_LEVEL", "WARNING").upper()
    )
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def configure(self) -> None:
        """Apply this configuration to the root logger."""
        logging.basicConfig(level=self.level, format=self.format)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))

    table: TableConfig = field(default_factory=TableConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = AppConfig()
