"""
IBM Cloud IAM token client.

Exchanges an API key for a bearer token once per scrape run. Tokens last
about an hour, longer than a typical run, so no refresh is attempted.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_IAM_URL = "https://iam.cloud.ibm.com/identity/token"
APIKEY_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"


class IamTokenError(RuntimeError):
    pass


class IamTokenClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        iam_url: Optional[str] = None,
        *,
        api_key_env: str = "IBM_CLOUD_API_KEY",
        max_retries: int = 3,
        timeout_seconds: float = 20.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key or os.getenv(api_key_env, "")
        self.iam_url = iam_url or DEFAULT_IAM_URL
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic"""
        session = requests.Session()
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def get_token(self) -> str:
        if not self.api_key:
            raise IamTokenError("IBM Cloud API key is not configured.")

        try:
            response = self.session.post(
                self.iam_url,
                data={
                    "grant_type": APIKEY_GRANT_TYPE,
                    "response_type": "cloud_iam",
                    "apikey": self.api_key,
                },
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise IamTokenError(f"IAM token request failed: {e}") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise IamTokenError("IAM response did not include an access_token")
        logger.info("Obtained IAM access token")
        return str(token)
