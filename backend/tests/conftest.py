"""
Smart Filter test configuration.

Outbound HTTP never leaves the process: every test wires an
``httpx.MockTransport`` that plays both the image host and the classifier.
"""

import sys
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest
from PIL import Image

# Add backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from main import create_app  # noqa: E402
from smart_filter.config import FilterConfig  # noqa: E402

IMAGE_HOST = "example.com"
CLASSIFIER_BASE = "http://classifier.test"


# ============================================
# Image Fixtures
# ============================================

def make_png(size=(16, 16), color=(200, 30, 30)) -> bytes:
    """Render a small, non-uniform PNG so that blurring changes the pixels."""
    img = Image.new("RGB", size, color)
    for x in range(size[0] // 2):
        for y in range(size[1]):
            img.putpixel((x, y), (0, 0, 255))
    output = BytesIO()
    img.save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


# ============================================
# Fake Upstream
# ============================================

class FakeUpstream:
    """
    Scriptable stand-in for the image host and the classifier.

    ``images`` maps a path on IMAGE_HOST to (body, content-type or None).
    ``classifier`` is a callable returning an httpx.Response, or raising.
    """

    def __init__(self):
        self.images: Dict[str, tuple] = {}
        self.classifier: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.requests: List[httpx.Request] = []

    def add_image(self, path: str, body: bytes, content_type: Optional[str] = "image/png"):
        self.images[path] = (body, content_type)

    def classify_as(self, category):
        self.classifier = lambda request: httpx.Response(200, json={"ensemble_category": category})

    def classify_with(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.classifier = handler

    def requests_to(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if str(request.url).startswith(CLASSIFIER_BASE):
            if self.classifier is None:
                return httpx.Response(503)
            return self.classifier(request)

        if request.url.host == IMAGE_HOST and request.url.path in self.images:
            body, content_type = self.images[request.url.path]
            headers = {"content-type": content_type} if content_type else {}
            return httpx.Response(200, content=body, headers=headers)

        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def config() -> FilterConfig:
    return FilterConfig(nsfw_api_base=CLASSIFIER_BASE, port=3000)


@pytest.fixture
def client(config, upstream):
    from fastapi.testclient import TestClient

    app = create_app(config, transport=upstream.transport)
    with TestClient(app) as test_client:
        yield test_client
