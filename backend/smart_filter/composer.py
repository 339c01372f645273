"""
Response Composer

Builds the final image response: the original bytes when the classifier
judged the image safe, otherwise a blurred re-encoding.
"""

import asyncio
import logging
from io import BytesIO
from typing import Optional

from fastapi.responses import Response
from PIL import Image, ImageFilter, UnidentifiedImageError

from .classifier import Classification, UNKNOWN_CATEGORY
from .errors import TransformError
from .fetcher import FetchedImage

logger = logging.getLogger(__name__)

STATUS_HEADER = "X-NSFW-Status"
CATEGORY_HEADER = "X-NSFW-Category"

STATUS_SAFE = "safe"
STATUS_BLURRED = "blurred"

FORMAT_TO_MIME = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}


def blur_image(data: bytes, radius: float = 20.0, output_format: str = "png") -> bytes:
    """
    Gaussian-blur an image and re-encode it.

    Raises:
        TransformError: if the bytes cannot be decoded or encoded.
    """
    save_format = output_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"

    try:
        img = Image.open(BytesIO(data))
        img.load()

        # Palette, greyscale and CMYK images are blurred in RGB(A) space
        has_alpha = "A" in img.mode or "transparency" in img.info
        target_mode = "RGBA" if has_alpha and save_format != "JPEG" else "RGB"
        if img.mode != target_mode:
            img = img.convert(target_mode)

        blurred = img.filter(ImageFilter.GaussianBlur(radius=radius))

        output = BytesIO()
        blurred.save(output, format=save_format)
        return output.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise TransformError(f"Failed to blur image: {e}") from e


async def blur_image_async(data: bytes, radius: float, output_format: str, timeout: float) -> bytes:
    """Run ``blur_image`` in a worker thread, bounded by ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(blur_image, data, radius, output_format),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        raise TransformError(f"Blur timed out after {timeout:g}s")


def header_safe(label: Optional[str]) -> str:
    """Reduce a category label to printable ASCII for use in a header."""
    if not label:
        return UNKNOWN_CATEGORY
    cleaned = "".join(ch for ch in label if 32 <= ord(ch) < 127).strip()
    return cleaned or UNKNOWN_CATEGORY


def compose_response(
    image: FetchedImage,
    classification: Classification,
    blurred: Optional[bytes] = None,
    output_format: str = "png",
) -> Response:
    """
    Build the image response for a classified image.

    A safe classification returns the original bytes untouched. Anything
    else requires ``blurred`` and returns it in the fixed output format.
    """
    category = header_safe(classification.category)

    if classification.is_safe:
        return Response(
            content=image.data,
            media_type=image.content_type,
            headers={STATUS_HEADER: STATUS_SAFE, CATEGORY_HEADER: category},
        )

    if blurred is None:
        raise TransformError("Unsafe image has no blurred rendition")

    return Response(
        content=blurred,
        media_type=FORMAT_TO_MIME.get(output_format.lower(), "image/png"),
        headers={STATUS_HEADER: STATUS_BLURRED, CATEGORY_HEADER: category},
    )
