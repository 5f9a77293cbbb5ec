"""HTTP fetch client for NFT Viewer.

This module provides the GET-and-parse layer used to retrieve token metadata
documents and raw image bytes.
"""

# Standard library imports
import json
from typing import Any, Optional, Tuple, Type, Union

# Third-party library imports
import httpx

# Internal imports
from nft_viewer.config import ViewerConfig
from nft_viewer.logging_config import get_logger
from nft_viewer.utils.errors import FetchError, MissingFieldError, ParseError

logger = get_logger(__name__)

JSON_TYPE_NAMES = {
    str: "string",
    list: "array",
    dict: "object",
    int: "number",
    float: "number",
}


class MetadataFetcher:
    """Fetches metadata documents and image bytes over HTTP."""

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the fetcher.

        Args:
            config: Viewer configuration. Defaults to ViewerConfig().
            http_client: Optional pre-built client; the fetcher will not close it.
        """
        self.config = config or ViewerConfig()
        self._http_client = http_client
        self._owns_client = http_client is None

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            kwargs = {"follow_redirects": True}
            if self.config.http_timeout is not None:
                kwargs["timeout"] = self.config.http_timeout
            self._http_client = httpx.AsyncClient(**kwargs)
        return self._http_client

    async def _get(self, url: str) -> httpx.Response:
        """Perform a single GET.

        Raises:
            FetchError: On transport failure or a non-2xx status
        """
        logger.debug(f"GET {url}")
        try:
            response = await self._client().get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} fetching {url}",
                url=url,
                status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Request to {url} failed: {str(e)}", url=url) from e
        return response

    async def fetch_json(self, url: str) -> Any:
        """Fetch a URL and parse the body as JSON.

        Args:
            url: The resolved HTTP(S) URL

        Returns:
            The untyped JSON document

        Raises:
            FetchError: On network or transport failure
            ParseError: If the body is not valid JSON
        """
        response = await self._get(url)
        try:
            return json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Malformed JSON from {url}: {str(e)}", url=url) from e

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch a URL and return the raw body.

        Raises:
            FetchError: On network or transport failure
        """
        response = await self._get(url)
        return response.content

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the HTTP client if this fetcher created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None


def require_field(
    document: Any,
    key: str,
    expected_type: Union[Type, Tuple[Type, ...]],
    context: Optional[str] = None
) -> Any:
    """Extract a required key from a JSON object with a type check.

    Args:
        document: A parsed JSON value expected to be an object
        key: The key to extract
        expected_type: Python type(s) the value must have
        context: Optional description included in the error message

    Returns:
        The value stored under ``key``

    Raises:
        MissingFieldError: If the document is not an object, the key is
            absent, or the value has the wrong type
    """
    types = expected_type if isinstance(expected_type, tuple) else (expected_type,)
    type_name = " or ".join(JSON_TYPE_NAMES.get(t, t.__name__) for t in types)

    if not isinstance(document, dict) or key not in document:
        raise MissingFieldError(key, type_name, context)

    value = document[key]
    # JSON booleans are ints in Python; never accept them for another type
    if isinstance(value, bool) and bool not in types:
        raise MissingFieldError(key, type_name, context)
    if not isinstance(value, types):
        raise MissingFieldError(key, type_name, context)
    return value
