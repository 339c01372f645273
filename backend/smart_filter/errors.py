"""Exceptions raised by the filter relay."""


class FilterError(Exception):
    """Base class for relay failures."""


class URLDecodeError(FilterError, ValueError):
    """A percent-decoding pass hit a malformed escape."""


class FetchError(FilterError):
    """The upstream image could not be downloaded."""


class UnsupportedContentTypeError(FilterError):
    """The upstream answered with something that is not an image."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Upstream returned non-image content: {content_type or 'unknown'}")


class ClassifierError(FilterError):
    """The classification service failed or answered with garbage."""


class TransformError(FilterError):
    """Blurring or re-encoding the image failed."""
