"""Exceptions raised by the font atlas pipeline."""


class FontAtlasError(Exception):
    """Base class for font atlas pipeline errors."""


class ImageDecodeError(FontAtlasError):
    """The source image could not be decoded into a pixel buffer."""


class PackingError(FontAtlasError):
    """The atlas canvas could not be created or composited."""


class IdentificationError(FontAtlasError):
    """The character identification service is unavailable or misconfigured."""
