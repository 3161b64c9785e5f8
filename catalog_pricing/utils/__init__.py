"""
Utility modules for the catalog pricing scraper
"""
from .config_loader import ScraperConfig, load_scraper_config
from .hashing import price_hash, product_hash, stamp_hashes
from .rate_limiter import AsyncRateLimiter

__all__ = [
    'ScraperConfig',
    'load_scraper_config',
    'price_hash',
    'product_hash',
    'stamp_hashes',
    'AsyncRateLimiter',
]
