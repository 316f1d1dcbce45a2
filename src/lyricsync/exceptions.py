"""Custom exceptions for LyricSync."""


class LyricSyncError(Exception):
    """Base exception for LyricSync."""

    pass


class ConfigError(LyricSyncError):
    """Invalid configuration value."""

    pass


class ValidationError(LyricSyncError):
    """Invalid input parameters."""

    pass


class SubtitleError(LyricSyncError):
    """Subtitle input yielded no usable lyric lines."""

    pass


class AssetLoadError(LyricSyncError):
    """Image or audio asset could not be loaded."""

    pass


class GenerationError(LyricSyncError):
    """Background image generation failed."""

    pass


class EncoderError(LyricSyncError):
    """Encoder backend failed to initialize or run."""

    pass


class ExportError(LyricSyncError):
    """Video export aborted."""

    pass


class ExportBusyError(ExportError):
    """Another export is already running on the same encoder."""

    pass
