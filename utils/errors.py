class WatermarkError(Exception):
    """Base class for every error raised by the watermarker."""


class ValidationError(WatermarkError, ValueError):
    """A configuration value is out of range. Raised before any image is read."""


class CollaboratorError(WatermarkError):
    """A font, decode or encode step failed outside the compositing core."""


class FontLoadError(CollaboratorError):
    pass


class GlyphRenderError(CollaboratorError):
    pass


class DecodeError(CollaboratorError):
    pass


class EncodeError(CollaboratorError):
    pass
