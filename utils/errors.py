"""
Exception types for the QR PDF service.
"""
import traceback


class QRPdfError(Exception):
    """Base class for every error raised by this service."""


class ConfigError(QRPdfError):
    """Raised at start-up when the environment holds an unusable value."""


class PipelineError(QRPdfError):
    """
    A failure inside one of the generation stages.

    The message is short and safe to return to the client; the underlying
    cause (if any) is chained and only ever logged.
    """
    stage = "pipeline"


class EncodingError(PipelineError):
    stage = "encoding"


class AssetError(PipelineError):
    stage = "loading"


class GeometryError(PipelineError):
    stage = "compositing"


class RenderError(PipelineError):
    stage = "assembling"


def describe_error(exc):
    """Name, message and stack of an exception, for server-side logs only."""
    return {
        "name": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }
