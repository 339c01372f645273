"""
Image Fetcher

Downloads remote images with browser-like headers so that hotlink
protection on CDNs does not reject the relay.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from .config import FilterConfig
from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
IMAGE_ACCEPT = "image/webp,image/apng,image/*,*/*"


@dataclass
class FetchedImage:
    """Raw bytes of a downloaded image plus what the upstream declared."""
    url: str
    data: bytes
    content_type: str

    @property
    def media_type(self) -> str:
        """Content type without parameters, lower-cased."""
        return self.content_type.split(";")[0].strip().lower()

    @property
    def size(self) -> int:
        return len(self.data)


class ImageFetcher:
    """
    Fetches images over HTTP.

    Usage:
        fetcher = ImageFetcher(config)
        image = await fetcher.fetch(url, timeout=15)
        await fetcher.close()
    """

    def __init__(self, config: FilterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.http_client = httpx.AsyncClient(
            follow_redirects=True,
            transport=transport,
            headers={
                "User-Agent": config.user_agent,
                "Referer": config.referer,
            },
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def fetch(self, url: str, *, timeout: float, accept_images: bool = True) -> FetchedImage:
        """
        Download ``url`` as binary content.

        Args:
            url: Fully decoded image URL
            timeout: Seconds before the download is abandoned
            accept_images: Send an image-preferring Accept header

        Raises:
            FetchError: on bad URLs, timeouts, transport errors, non-2xx
                statuses and oversized bodies.
        """
        try:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https"):
                raise ValueError(f"Invalid URL scheme: {parsed.scheme or 'none'}")
            if not parsed.netloc:
                raise ValueError("Invalid URL host")
        except ValueError as e:
            logger.error(f"[ImageFetcher] Invalid URL {url[:60]}: {e}")
            raise FetchError(f"Invalid URL: {e}") from e

        headers = {"Accept": IMAGE_ACCEPT} if accept_images else None

        try:
            logger.info(f"[ImageFetcher] Downloading: {url[:80]}...")
            response = await self.http_client.get(url, headers=headers, timeout=timeout)
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"[ImageFetcher] Timeout: {url[:60]}...")
            raise FetchError(f"Image fetch timed out after {timeout:g}s")
        except httpx.HTTPStatusError as e:
            logger.error(f"[ImageFetcher] HTTP error {e.response.status_code}: {url[:60]}...")
            raise FetchError(f"Upstream returned HTTP {e.response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"[ImageFetcher] Fetch error: {e}")
            raise FetchError(f"Failed to fetch image: {e}") from e

        data = response.content
        if len(data) > self.config.max_image_size_bytes:
            raise FetchError(f"Image too large (max {self.config.max_image_size_mb}MB)")

        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        logger.info(f"[ImageFetcher] Downloaded {len(data)} bytes ({content_type}): {url[:60]}...")

        return FetchedImage(url=url, data=data, content_type=content_type)
