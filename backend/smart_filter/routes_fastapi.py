"""
Smart Filter API Routes

Provides endpoints for:
- Filtering external images (original if safe, blurred otherwise)
- Proxying external images untouched
- Health check and usage information
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from .config import FilterConfig
from .errors import FetchError, TransformError, UnsupportedContentTypeError
from .relay import FilterRelay

logger = logging.getLogger(__name__)

SAMPLE_IMAGE_URL = "https%3A%2F%2Fae01.alicdn.com%2Fkf%2FS48cec483fac04ff9b5d824a4760f021ff%2F48x48.png"


# ============================================
# Response Models
# ============================================

class HealthResponse(BaseModel):
    """Liveness payload."""
    status: str = "OK"
    service: str
    timestamp: str


class UsageInfo(BaseModel):
    main: str
    example: str
    fallback: str


class TestLinks(BaseModel):
    filtered: str
    direct: str


class UsageResponse(BaseModel):
    """Usage documentation payload."""
    message: str
    usage: UsageInfo
    test_links: TestLinks


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


# ============================================
# Dependencies
# ============================================

def get_relay(request: Request) -> FilterRelay:
    return request.app.state.relay


def get_config(request: Request) -> FilterConfig:
    return request.app.state.relay.config


def error_response(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# ============================================
# Router
# ============================================

router = APIRouter(tags=["Smart Filter"])


# ============================================
# Endpoints
# ============================================

@router.get("/filter")
async def filter_image(
    url: Optional[str] = Query(None, description="Percent-encoded image URL"),
    relay: FilterRelay = Depends(get_relay),
):
    """
    Return the image if the classifier judges it safe, a blurred PNG otherwise.

    Response headers:
        X-NSFW-Status: safe | blurred
        X-NSFW-Category: classifier label, or api_error if it was unreachable

    Example:
        GET /filter?url=https%3A%2F%2Fexample.com%2Fa.png
    """
    logger.info(f"[SmartFilter] Filter request: {(url or '')[:80]}")
    if not url:
        return error_response(400, "Missing image URL")

    try:
        response = await relay.filter(url)
    except UnsupportedContentTypeError as e:
        return error_response(415, "Unsupported content type", str(e))
    except (FetchError, TransformError) as e:
        logger.error(f"[SmartFilter] Filter failed: {e}")
        return error_response(500, "Filter failed", str(e))
    except Exception as e:
        logger.exception(f"[SmartFilter] Unexpected error: {e}")
        return error_response(500, "Filter failed", str(e))

    logger.info(f"[SmartFilter] Filtering complete: {response.headers.get('x-nsfw-status')}")
    return response


@router.get("/proxy")
async def proxy_image(
    url: Optional[str] = Query(None, description="Percent-encoded image URL"),
    relay: FilterRelay = Depends(get_relay),
):
    """
    Relay an external image verbatim, without classification.

    Example:
        GET /proxy?url=https%3A%2F%2Fexample.com%2Fa.png
    """
    if not url:
        return error_response(400, "Missing image URL")

    try:
        image = await relay.proxy(url)
    except FetchError as e:
        logger.error(f"[SmartFilter] Proxy error: {e}")
        return error_response(500, "Proxy failed")

    return Response(content=image.data, media_type=image.content_type)


@router.get("/health", response_model=HealthResponse)
async def health_check(config: FilterConfig = Depends(get_config)):
    """Health check endpoint."""
    return HealthResponse(
        service=config.service_name,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/test", response_model=UsageResponse)
async def usage(config: FilterConfig = Depends(get_config)):
    """Usage documentation with a worked example."""
    return UsageResponse(
        message="Smart Filter Server is running!",
        usage=UsageInfo(
            main="GET /filter?url=ENCODED_IMAGE_URL",
            example=f"http://localhost:{config.port}/filter?url={SAMPLE_IMAGE_URL}",
            fallback="GET /proxy?url=ENCODED_IMAGE_URL",
        ),
        test_links=TestLinks(
            filtered=f"/filter?url={SAMPLE_IMAGE_URL}",
            direct=f"/proxy?url={SAMPLE_IMAGE_URL}",
        ),
    )
