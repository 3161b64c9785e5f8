"""
Real HTTP integration clients.

These clients communicate with IBM Cloud over HTTP:
- Global Catalog (catalog hierarchy and pricing)
- IAM (API key to bearer token)

Important:
- Must expose the same catalog operations as the mock client
- Must return data shaped according to catalog_pricing/integrations/contracts/*
"""

from .global_catalog import IAAS_QUERY, SERVICE_QUERY, CatalogQuery, GlobalCatalogClient
from .iam import IamTokenClient, IamTokenError

__all__ = [
    "CatalogQuery",
    "GlobalCatalogClient",
    "IAAS_QUERY",
    "IamTokenClient",
    "IamTokenError",
    "SERVICE_QUERY",
]
