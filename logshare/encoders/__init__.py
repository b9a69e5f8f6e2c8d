"""logshare export codecs package.

Both codecs share the BaseEncoder interface; ``encoder_for`` picks one for an
ExportFormat.
"""

from __future__ import annotations

from typing import Optional

from logshare.clients.log_store import LogStore
from logshare.encoders.base import BaseEncoder
from logshare.encoders.container_encoder import ContainerEncoder
from logshare.encoders.text_encoder import TextEncoder
from logshare.models.options import ExportFormat
from logshare.rendering.text_renderer import TextRenderer


def encoder_for(
    fmt: ExportFormat,
    store: LogStore,
    renderer: Optional[TextRenderer] = None,
    **kwargs,
) -> BaseEncoder:
    """Return the codec for ``fmt``.

    Args:
        fmt: Selected output format.
        store: Store used by the container codec.
        renderer: Renderer used by the text codec.
        **kwargs: Forwarded to the codec (prefix, timestamp_format, extension).
    """
    if fmt is ExportFormat.CONTAINER:
        return ContainerEncoder(store, **kwargs)
    return TextEncoder(renderer, **kwargs)


__all__ = [
    "BaseEncoder",
    "ContainerEncoder",
    "TextEncoder",
    "encoder_for",
]
