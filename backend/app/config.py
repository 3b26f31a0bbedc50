"""
Application configuration using Pydantic settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import Dict, List


DEFAULT_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Food & Dining": ["coffee", "restaurant", "food", "lunch", "dinner", "breakfast", "cafe", "starbucks", "mcdonald", "pizza"],
    "Transportation": ["gas", "fuel", "uber", "lyft", "taxi", "train", "bus", "parking", "metro"],
    "Shopping": ["store", "shopping", "mall", "amazon", "target", "walmart", "clothes", "shirt"],
    "Entertainment": ["movie", "cinema", "theater", "netflix", "spotify", "game", "concert"],
    "Health & Fitness": ["gym", "doctor", "pharmacy", "medicine", "hospital", "fitness"],
    "Bills & Utilities": ["bill", "electric", "water", "internet", "phone", "rent", "mortgage"],
}


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Spending Tracker"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/db.sqlite"

    # Recurring detection
    similarity_threshold: float = 0.8
    min_confidence: float = 0.6
    upcoming_window_days: int = 7

    # Category guessing, category -> keywords (first match wins)
    category_keywords: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_CATEGORY_KEYWORDS.items()}
    )

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


# Global settings instance
settings = Settings()
