"""
Google Scholar search through SerpAPI.

A thin pass-through: the query is forwarded with the server-side API key and
the upstream JSON is handed back untouched.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from studybuddy.config import settings

logger = logging.getLogger(__name__)

RESULTS_PER_PAGE = 10


class ScholarError(Exception):
    """Base error; ``status_code`` and ``payload`` are what the API should answer."""

    status_code = 500

    def __init__(self, error: str, details: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    @property
    def payload(self) -> Dict[str, Any]:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ScholarConfigError(ScholarError):
    status_code = 500


class ScholarUpstreamError(ScholarError):
    """SerpAPI answered with a non-2xx status (mirrored to the caller)."""


class ScholarTransportError(ScholarError):
    """SerpAPI could not be reached or returned unreadable JSON."""
    status_code = 500


class ScholarClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = settings.SERP_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.SERPAPI_URL
        self.client = http_client or httpx.Client(timeout=timeout or settings.SCHOLAR_TIMEOUT)

    def build_params(self, q: str, start: int = 0) -> Dict[str, str]:
        return {
            "api_key": self.api_key,
            "engine": "google_scholar",
            "q": q,
            "hl": "en",
            "start": str(start),
            "num": str(RESULTS_PER_PAGE),
        }

    def search(self, q: str, start: int = 0) -> Dict[str, Any]:
        if not self.api_key:
            raise ScholarConfigError("Server configuration error: API key missing")

        logger.info("[SCHOLAR] search q=%r start=%d", q, start)
        try:
            res = self.client.get(self.base_url, params=self.build_params(q, start))
        except httpx.HTTPError as e:
            logger.error("[SCHOLAR] transport error: %s", e)
            raise ScholarTransportError("Failed to fetch data from SerpAPI", details=str(e)) from e

        if res.is_error:
            logger.error("[SCHOLAR] upstream %d: %s", res.status_code, res.text[:200])
            raise ScholarUpstreamError("SerpAPI request failed", details=res.text, status_code=res.status_code)

        try:
            return res.json()
        except ValueError as e:
            raise ScholarTransportError("Failed to fetch data from SerpAPI", details="invalid JSON from upstream") from e

    def close(self):
        self.client.close()


_client: Optional[ScholarClient] = None


def get_scholar_client() -> ScholarClient:
    """FastAPI dependency; one shared client per process."""
    global _client
    if _client is None:
        _client = ScholarClient()
    return _client
