"""
Smart Filter Module

Relays external images through a content classifier.

Features:
- Repeated percent-decoding of image URLs
- Browser-like image fetching with bounded timeouts
- Fail-safe classification (outages always blur)
- Gaussian blur re-encoding for unsafe images
- Plain proxy fallback
"""

from .config import FilterConfig
from .relay import FilterRelay
from .routes_fastapi import router

__all__ = ["router", "FilterConfig", "FilterRelay"]
