"""
HTTP client for fetching stylesheets from URLs.
"""

from abc import ABC, abstractmethod
import logging

import requests
from requests.exceptions import RequestException


class HttpClient(ABC):
    """Abstract base class for HTTP operations."""

    @abstractmethod
    def download_text(self, url: str) -> str:
        """
        Download a text document from a URL.

        Args:
            url: The URL to download from

        Returns:
            str: The decoded response body
        """


class RequestsClient(HttpClient):
    """Implementation of HttpClient using the requests library."""

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def download_text(self, url: str) -> str:
        """
        Download a stylesheet using the requests library.

        Args:
            url: The URL to download from

        Returns:
            str: The stylesheet text

        Raises:
            RuntimeError: If the request fails or the status is not 200
        """
        logger = logging.getLogger("css-image-embedder")

        try:
            logger.debug(f"Downloading stylesheet: {url}")
            response = requests.get(url, timeout=self.timeout)
        except RequestException as e:
            raise RuntimeError(f"Error downloading {url}: {e}") from e

        if response.status_code != 200:
            raise RuntimeError(f"Failed to download {url} - Status code: {response.status_code}")

        # Stylesheets without a charset are served as ISO-8859-1 by default
        if not response.encoding or response.encoding.lower() == "iso-8859-1":
            response.encoding = response.apparent_encoding or "utf-8"
        logger.debug(f"Download successful: {url} - Size: {len(response.content)} bytes")
        return response.text


def create_http_client() -> HttpClient:
    """
    Factory function to create an HTTP client.

    Returns:
        HttpClient: An instance of an HttpClient implementation
    """
    return RequestsClient()
