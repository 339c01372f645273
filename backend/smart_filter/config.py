"""
Smart Filter Configuration

All tunables for the relay live in one dataclass that is handed to the
application factory. Nothing here is read at import time.
"""

import os
from dataclasses import dataclass, field
from typing import List


DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass
class FilterConfig:
    """Configuration for the filter relay."""
    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    service_name: str = "Smart Image Filter"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Classifier settings
    nsfw_api_base: str = "http://aimodel.ddns.net:8000"
    safe_category: str = "male_only"

    # Timeouts in seconds
    fetch_timeout: float = 15.0         # /filter download
    proxy_timeout: float = 10.0         # /proxy download
    classify_timeout: float = 20.0      # classifier round trip
    transform_timeout: float = 15.0     # blur + encode

    # Upstream request settings
    user_agent: str = DEFAULT_USER_AGENT
    referer: str = "https://www.aliexpress.com/"
    max_image_size_mb: int = 10

    # Transform settings
    blur_radius: float = 20.0
    output_format: str = "png"

    # URL decoding
    max_decode_passes: int = 10

    @property
    def classify_url(self) -> str:
        return f"{self.nsfw_api_base.rstrip('/')}/predict/single"

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "FilterConfig":
        """Build a config from environment variables, falling back to defaults."""
        defaults = cls()
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            host=os.getenv("HOST", defaults.host),
            port=int(os.getenv("PORT", str(defaults.port))),
            cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            nsfw_api_base=os.getenv("NSFW_API_BASE", defaults.nsfw_api_base),
            safe_category=os.getenv("NSFW_SAFE_CATEGORY", defaults.safe_category),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", str(defaults.fetch_timeout))),
            proxy_timeout=float(os.getenv("PROXY_TIMEOUT", str(defaults.proxy_timeout))),
            classify_timeout=float(os.getenv("CLASSIFY_TIMEOUT", str(defaults.classify_timeout))),
            transform_timeout=float(os.getenv("TRANSFORM_TIMEOUT", str(defaults.transform_timeout))),
            referer=os.getenv("UPSTREAM_REFERER", defaults.referer),
            max_image_size_mb=int(os.getenv("IMAGE_MAX_SIZE_MB", str(defaults.max_image_size_mb))),
            blur_radius=float(os.getenv("BLUR_RADIUS", str(defaults.blur_radius))),
        )
