"""
Configuration loader for the catalog pricing scraper
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "scraper_config.yml"


class RateLimitConfig(BaseModel):
    """Client-side throttle, off unless enabled"""

    enabled: bool = False
    requests_per_minute: int = Field(default=600, ge=1, le=10000)


class CatalogQueryConfig(BaseModel):
    """One root listing of the catalog (e.g. active services)"""

    name: str
    q: str
    include: str = "id:geo_tags:kind:name:pricing_tags:tags"
    account: str = "global"
    product_family: Literal["service", "iaas"] = "service"


def _default_queries() -> List[CatalogQueryConfig]:
    return [
        CatalogQueryConfig(name="saas", q="kind:service active:true", product_family="service"),
        CatalogQueryConfig(name="iaas", q="kind:iaas active:true", product_family="iaas"),
    ]


class CatalogConfig(BaseModel):
    """Remote catalog access configuration"""

    base_url: str = "https://globalcatalog.cloud.ibm.com/api/v1"
    iam_url: str = "https://iam.cloud.ibm.com/identity/token"
    api_key_env: str = "IBM_CLOUD_API_KEY"
    page_limit: int = Field(default=200, ge=1, le=200)
    chunk_size: int = Field(default=8, ge=1, le=16)
    max_depth: int = Field(default=32, ge=1, le=256)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_delay_seconds: float = Field(default=30.0, ge=0.0)
    queries: List[CatalogQueryConfig] = Field(default_factory=_default_queries)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


class PricingConfig(BaseModel):
    """Which vendor and geo bucket products are normalized for"""

    vendor_name: str = "ibm"
    country: str = "USA"
    currency: str = "USD"


class StoreConfig(BaseModel):
    """Destination products table"""

    table_name: str = "products"
    batch_size: int = Field(default=1000, ge=1, le=10000)
    database_url_env: str = "DATABASE_URL"

    def database_url(self) -> Optional[str]:
        url = os.getenv(self.database_url_env, "").strip()
        return url or None


class ScraperConfig(BaseModel):
    """Complete scraper configuration"""

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    output_dir: Optional[str] = None


def load_scraper_config(config_path: Optional[Path] = None) -> ScraperConfig:
    """
    Load and validate scraper configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/scraper_config.yml

    Returns:
        Validated ScraperConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = ScraperConfig(**data)
        logger.info("Successfully loaded scraper config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Scraper config validation failed: %s", e)
        raise
