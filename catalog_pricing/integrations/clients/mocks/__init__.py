"""
Mock integration clients.

These clients return realistic catalog data without calling any external API.
They are used when:
- Running the pipeline offline against a saved catalog fixture
- Testing the walker and pipeline end-to-end without network access

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to catalog_pricing/integrations/contracts/*
"""

from .global_catalog import MockGlobalCatalogClient

__all__ = ["MockGlobalCatalogClient"]
