"""Image download for exported documents."""

from __future__ import annotations

from .download import build_image_client, download_image, extension_for_content_type

__all__ = [
    "build_image_client",
    "download_image",
    "extension_for_content_type",
]
