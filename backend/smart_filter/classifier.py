"""
Classifier Client

Submits image bytes to the external content-classification service.

The client never raises. Any failure is converted into an unsafe
``api_error`` classification so that an outage can only ever lead to a
blurred image.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import FilterConfig
from .errors import ClassifierError

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "unknown"
API_ERROR_CATEGORY = "api_error"


@dataclass
class Classification:
    """Outcome of one classifier call."""
    category: str
    is_safe: bool
    available: bool = True


class ClassifierClient:
    """HTTP client for the ``/predict/single`` classification endpoint."""

    def __init__(self, config: FilterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.http_client = httpx.AsyncClient(transport=transport)

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    def category_from_payload(self, payload: Any) -> str:
        """
        Pull the ensemble category out of a classifier response body.

        Raises:
            ClassifierError: if the body is not a JSON object.
        """
        if not isinstance(payload, dict):
            raise ClassifierError(f"Unexpected response body: {type(payload).__name__}")
        category = payload.get("ensemble_category")
        if not isinstance(category, str) or not category:
            return UNKNOWN_CATEGORY
        return category

    async def _predict(self, data: bytes) -> str:
        files = {"file": ("check.jpg", data, "image/jpeg")}
        try:
            response = await self.http_client.post(
                self.config.classify_url,
                files=files,
                timeout=self.config.classify_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise ClassifierError(f"Timed out after {self.config.classify_timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            raise ClassifierError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ClassifierError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ClassifierError(f"Invalid JSON: {e}") from e

        logger.debug(f"[Classifier] Response: {payload}")
        return self.category_from_payload(payload)

    async def classify(self, data: bytes) -> Classification:
        """Classify ``data``; failures degrade to an unsafe classification."""
        try:
            category = await self._predict(data)
        except ClassifierError as e:
            logger.warning(f"[Classifier] API failed, defaulting to blur: {e}")
            return Classification(category=API_ERROR_CATEGORY, is_safe=False, available=False)

        is_safe = category == self.config.safe_category
        logger.info(f"[Classifier] Result: {category}, safe: {is_safe}")
        return Classification(category=category, is_safe=is_safe)
