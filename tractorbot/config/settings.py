"""Configuration settings for the tractor negotiation bot."""

from decimal import Decimal
from typing import Literal, Optional

from pydantic_settings import BaseSettings
from pydantic import Field
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = Field(
        default="development",
        description="Environment: 'development' or 'production'",
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL URL (falls back to SQLite when unset)",
    )
    database_path: Path = Field(
        default=Path("data/tractorbot.db"),
        description="Path to SQLite database",
    )

    # Catalog
    catalog_path: Path = Field(
        default=Path(__file__).parent.parent / "data" / "tractors.json",
        description="JSON file used to seed the catalog",
    )

    # Sessions
    session_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Where conversation sessions are kept",
    )

    # Replies
    reply_marker: str = Field(
        default="🤖",
        description="Decorative prefix added to every outbound text message",
    )

    # Negotiation policy
    min_offer_ratio: Decimal = Field(
        default=Decimal("0.9"),
        gt=0,
        le=1,
        description="Fraction of the listed price the seller accepts",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_postgres(self) -> bool:
        """Whether a PostgreSQL database is configured."""
        return bool(self.database_url) and self.database_url.startswith(
            ("postgres://", "postgresql")
        )


settings = Settings()
