"""
Filter Relay

Runs one filtering request end to end:

    Received -> Decoded -> Fetched -> Classified -> Composed -> Responded

Fetch and transform failures propagate to the caller. A classifier failure
never does; it moves forward as an unsafe classification.
"""

import logging
from typing import Optional

import httpx
from fastapi.responses import Response

from .classifier import ClassifierClient
from .composer import blur_image_async, compose_response
from .config import FilterConfig
from .errors import UnsupportedContentTypeError
from .fetcher import FetchedImage, ImageFetcher
from .url_resolver import resolve_image_url

logger = logging.getLogger(__name__)

# Media types that may still hold image data despite not saying so
OPAQUE_MEDIA_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def is_image_media_type(media_type: str) -> bool:
    return media_type.startswith("image/") or media_type in OPAQUE_MEDIA_TYPES


class FilterRelay:
    """
    Fetch, classify and (if needed) blur remote images.

    Usage:
        relay = FilterRelay(FilterConfig.from_env())
        response = await relay.filter(encoded_url)
        await relay.close()
    """

    def __init__(
        self,
        config: FilterConfig,
        fetcher: Optional[ImageFetcher] = None,
        classifier: Optional[ClassifierClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.fetcher = fetcher or ImageFetcher(config, transport=transport)
        self.classifier = classifier or ClassifierClient(config, transport=transport)

    async def close(self):
        """Close both HTTP clients."""
        await self.fetcher.close()
        await self.classifier.close()

    def resolve(self, raw_url: str) -> str:
        return resolve_image_url(raw_url, max_passes=self.config.max_decode_passes)

    async def filter(self, raw_url: str) -> Response:
        """
        Return the original image if it is safe, a blurred PNG otherwise.

        Raises:
            FetchError: the image could not be downloaded.
            UnsupportedContentTypeError: the upstream did not return an image.
            TransformError: blurring or encoding failed.
        """
        url = self.resolve(raw_url)
        logger.info(f"[SmartFilter] Decoded URL: {url[:80]}...")

        image = await self.fetcher.fetch(url, timeout=self.config.fetch_timeout)
        if not is_image_media_type(image.media_type):
            logger.warning(f"[SmartFilter] Non-image content-type {image.content_type}: {url[:60]}...")
            raise UnsupportedContentTypeError(image.content_type)

        logger.info(f"[SmartFilter] Image downloaded, size: {image.size} bytes")
        classification = await self.classifier.classify(image.data)
        if not classification.available:
            logger.warning(f"[SmartFilter] Classifier unavailable, forcing blur: {url[:60]}...")

        if classification.is_safe:
            logger.info("[SmartFilter] Returning original safe image")
            return compose_response(image, classification)

        logger.info(f"[SmartFilter] Applying blur ({classification.category}): {url[:60]}...")
        blurred = await blur_image_async(
            image.data,
            radius=self.config.blur_radius,
            output_format=self.config.output_format,
            timeout=self.config.transform_timeout,
        )
        return compose_response(image, classification, blurred, self.config.output_format)

    async def proxy(self, raw_url: str) -> FetchedImage:
        """
        Fetch an image without classification or transformation.

        Raises:
            FetchError: the image could not be downloaded.
        """
        url = self.resolve(raw_url)
        logger.info(f"[SmartFilter] Proxying: {url[:80]}...")
        return await self.fetcher.fetch(url, timeout=self.config.proxy_timeout, accept_images=False)
