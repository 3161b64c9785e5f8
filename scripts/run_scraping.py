#!/usr/bin/env python3
"""
Production script to scrape catalog pricing into the products table
"""
import sys
import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional

# Add the project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from catalog_pricing.integrations.clients.mocks import MockGlobalCatalogClient
from catalog_pricing.pipeline import list_catalog_roots, scrape_and_store
from catalog_pricing.utils.config_loader import load_scraper_config


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def main():
    """Main entry point for the pricing scraper"""
    parser = argparse.ArgumentParser(
        description='Scrape IBM Cloud Global Catalog pricing into Postgres',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run scraper with default config
  python scripts/run_scraping.py

  # Run scraper with verbose output
  python scripts/run_scraping.py --verbose

  # Run scraper with custom config
  python scripts/run_scraping.py --config config/custom_config.yml

  # Also write catalog/product JSON snapshots
  python scripts/run_scraping.py --output-dir data/catalog

  # Only list the root catalog entries
  python scripts/run_scraping.py --dry-run

  # Run offline against a saved catalog fixture
  python scripts/run_scraping.py --mock-catalog tests/fixtures/sample_catalog.json
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to scraper config YAML file (default: config/scraper_config.yml)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help='Directory for catalog/product JSON snapshots (overrides config)'
    )

    parser.add_argument(
        '--mock-catalog',
        type=Path,
        default=None,
        help='Serve the catalog from a JSON fixture instead of the live API'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/scraper.log'),
        help='Path to log file (default: logs/scraper.log)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Dry run mode - list root catalog entries without walking or writing'
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger = logging.getLogger(__name__)
    load_dotenv()

    try:
        logger.info("=" * 80)
        logger.info("Catalog Pricing Scraper")
        logger.info("=" * 80)

        config = load_scraper_config(args.config)
        if args.output_dir:
            config.output_dir = args.output_dir

        client = None
        if args.mock_catalog:
            client = MockGlobalCatalogClient.from_file(args.mock_catalog)

        catalog = config.catalog
        logger.info("Scraper Configuration:")
        logger.info("  Catalog URL: %s", catalog.base_url)
        logger.info("  Queries: %s", ", ".join(q.name for q in catalog.queries))
        logger.info("  Chunk size: %d", catalog.chunk_size)
        logger.info("  Rate Limiting: %s", 'Enabled' if catalog.rate_limit.enabled else 'Disabled')
        if catalog.rate_limit.enabled:
            logger.info("    Rate Limit: %d requests/min", catalog.rate_limit.requests_per_minute)
        logger.info("  Batch size: %d", config.store.batch_size)
        logger.info("  Output Directory: %s", config.output_dir or "(none)")

        if args.dry_run:
            logger.info("=" * 80)
            logger.info("DRY RUN MODE - nothing will be walked or written")
            logger.info("=" * 80)
            roots = asyncio.run(list_catalog_roots(config, client=client))
            for name, nodes in roots.items():
                logger.info("%s: %d root entries", name, len(nodes))
                for node in nodes[:5]:
                    logger.info("  - %s (%s)", node.name, node.kind.value)
                if len(nodes) > 5:
                    logger.info("  ... and %d more", len(nodes) - 5)
            return 0

        logger.info("Starting scrape...")
        summary = asyncio.run(scrape_and_store(config, client=client))

        logger.info("=" * 80)
        logger.info("SCRAPE COMPLETE")
        logger.info("=" * 80)
        logger.info("  Root entries: %d", summary.root_count)
        logger.info("  Products upserted: %d", summary.product_count)
        logger.info("  Batches flushed: %d", summary.batches_flushed)
        logger.info("  Node errors: %d", summary.error_count)
        for error_type, count in sorted(summary.errors_by_type.items()):
            logger.info("    %s: %d", error_type, count)

        if summary.product_count == 0:
            logger.error("No products were scraped. Check the API key and catalog queries.")
            return 2
        return 0

    except KeyboardInterrupt:
        logger.warning("Scraping interrupted by user")
        return 130
    except Exception as e:
        logger.error("Error during scraping: %s: %s", type(e).__name__, e, exc_info=args.verbose)
        return 1


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
