"""HTTP fetcher for the page whose resources are about to be purged.

Provides a small `Fetcher` object exposing `get` and `fetch_page`.
"""

from __future__ import annotations

from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from varnisher.core.config import DEFAULT_USER_AGENT
from varnisher.core.models import FailureReason, FetchResult
from varnisher.core.scraping.normalizer import encode_url


class Fetcher:
    """Small HTTP client with the fixed header set used for page fetches.

    Usage:
        f = Fetcher(timeout=15)
        result = f.fetch_page(url)
    """

    def __init__(
        self,
        timeout: float = 15,
        retries: int = 0,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        self.session = requests.Session()
        retry = Retry(total=retries, allowed_methods=frozenset(["GET"]))
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        self.user_agent = user_agent or DEFAULT_USER_AGENT

    @classmethod
    def from_config(cls, config) -> "Fetcher":
        return cls(timeout=config.fetch_timeout, user_agent=config.user_agent)

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Charset": "utf-8",
            "Accept": "text/html",
        }

    def get(self, url: str):
        return self.session.get(url, headers=self._headers(), timeout=self.timeout)

    def fetch_page(self, url: str) -> FetchResult:
        """GET `url` and return its body, or a FetchResult carrying the failure.

        The status code is recorded but not interpreted.
        """
        try:
            encoded = encode_url(url).geturl()
        except ValueError as exc:
            return FetchResult(
                url=url, failure=FailureReason.UNPARSABLE_URL, detail=str(exc)
            )

        try:
            resp = self.get(encoded)
            body = resp.text
        except (requests.RequestException, ValueError) as exc:
            return FetchResult(
                url=url, failure=FailureReason.FETCH_ERROR, detail=str(exc)
            )

        return FetchResult(url=url, body=body, status_code=resp.status_code)
