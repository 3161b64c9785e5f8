"""
Integrations layer.
This package contains all code used to communicate with external systems:
- IBM Cloud Global Catalog (service/iaas hierarchy and pricing)
- IBM Cloud IAM (API key to bearer token exchange)

Key rule:
- The walker and pipeline MUST NOT build HTTP requests directly.
- They call integration clients (under catalog_pricing/integrations/clients).
- The MOCK catalog client serves local fixtures; the REAL_HTTP client talks to the API.

Switching implementations happens in ONE place (catalog_pricing/pipeline.py).
"""
