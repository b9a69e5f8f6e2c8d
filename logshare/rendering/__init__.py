"""logshare text rendering package."""

from logshare.rendering.text_renderer import TextRenderer

__all__ = ["TextRenderer"]
