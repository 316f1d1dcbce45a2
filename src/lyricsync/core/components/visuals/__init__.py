"""Per-stanza background image generation."""

from .generator import BackgroundGenerator, Stanza, group_stanzas, load_background_assets

__all__ = ["BackgroundGenerator", "Stanza", "group_stanzas", "load_background_assets"]
