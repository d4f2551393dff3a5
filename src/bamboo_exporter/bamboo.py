"""Bamboo REST API client with basic auth, TLS policy and retries."""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .credentials import CredentialProvider
from .errors import CredentialError, TransportError, UnexpectedStatus


logger = logging.getLogger(__name__)

AGENTS_ENDPOINT = "/rest/api/latest/agent"
QUEUE_ENDPOINT = "/rest/api/latest/queue"
RESULTS_ENDPOINT = "/rest/api/latest/result"


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, TransportError) and error.retryable


class BambooClient:
    """Synchronous Bamboo API client.

    Only connection-level failures are retried; a non-200 answer, a body
    that cannot be content-decoded or missing credentials fail the call
    immediately.
    """

    def __init__(
        self,
        base_uri: str,
        credentials: CredentialProvider,
        insecure: bool = False,
        timeout_connect: float = 10.0,
        timeout_read: float = 30.0,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_uri = base_uri.rstrip("/")
        self.credentials = credentials
        self.insecure = insecure
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff

        self.client = httpx.Client(
            verify=not insecure,
            timeout=httpx.Timeout(timeout_read, connect=timeout_connect),
            headers={
                "Accept": "application/json",
                "User-Agent": "bamboo-exporter/1.0",
            },
            transport=transport,
        )

    def __enter__(self) -> "BambooClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def url_for(self, path: str) -> str:
        return self.base_uri + path

    def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """GET ``path`` and return the raw body of a 200 response."""
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        return retrying(self._fetch_once, path, params)

    def _fetch_once(self, path: str, params: Optional[Dict[str, Any]]) -> bytes:
        username, password = self._credentials_for(path)
        url = self.url_for(path)

        try:
            with self.client.stream(
                "GET", url, params=params, auth=(username, password)
            ) as response:
                if response.status_code != httpx.codes.OK:
                    raise UnexpectedStatus(
                        path, response.status_code, response.reason_phrase
                    )
                return response.read()
        except httpx.TransportError as e:
            logger.warning(f"Request to {path} failed: {e!r}")
            raise TransportError(path, f"error performing request: {e}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.warning(f"Request to {path} failed: {e!r}")
            raise TransportError(
                path, f"error performing request: {e}", retryable=False
            ) from e

    def _credentials_for(self, path: str):
        try:
            return self.credentials.get_credentials()
        except CredentialError:
            raise
        except Exception as e:
            raise CredentialError(path, f"credential provider failed: {e}") from e
