"""
Configuration loader for the storefront API
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "storefront.yml"


class ChatConfig(BaseModel):
    """Chat widget behaviour"""

    typing_delay_seconds: float = Field(default=1.0, ge=0.0, le=10.0)
    whatsapp_number: str = "919097999898"


class NewsletterConfig(BaseModel):
    """Newsletter provider list ids"""

    list_id: int = Field(default=1, ge=1)
    chatbot_list_id: int = Field(default=2, ge=1)
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class CatalogConfig(BaseModel):
    data_dir: str = "data/catalog"
    page_size: int = Field(default=12, ge=1, le=100)


class ApiConfig(BaseModel):
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])


class StorefrontConfig(BaseModel):
    """Complete storefront configuration"""

    chat: ChatConfig = Field(default_factory=ChatConfig)
    newsletter: NewsletterConfig = Field(default_factory=NewsletterConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    def catalog_dir(self, root: Optional[Path] = None) -> Path:
        path = Path(self.catalog.data_dir)
        if path.is_absolute():
            return path
        return (root or DEFAULT_CONFIG_PATH.parent.parent) / path


def load_storefront_config(config_path: Optional[Path] = None) -> StorefrontConfig:
    """
    Load and validate storefront configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/storefront.yml

    Returns:
        Validated StorefrontConfig object (defaults when the file is missing)

    Raises:
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning("Storefront config not found at %s; using defaults", config_path)
        return StorefrontConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        config = StorefrontConfig(**data)
        logger.info("Successfully loaded storefront config from %s", config_path)
        return config
    except ValidationError as e:
        logger.error("Storefront config validation failed: %s", e)
        raise
