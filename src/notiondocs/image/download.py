"""Image download: fetch a remote image into the static asset directory.

The stored filename is ``<8 random alphanumerics>_<time_ns><ext>`` where the
extension comes from the response ``Content-Type``, so Notion's signed S3
URLs (which often carry no usable extension) still land as ``.png`` /
``.jpeg`` files.
"""

from __future__ import annotations

import mimetypes
import random
import string
import time
from pathlib import Path

import httpx

from notiondocs.config import ExportConfig
from notiondocs.errors import NotiondocsAssetError

_RANDOM_ALPHABET = string.ascii_letters + string.digits

# mimetypes.guess_extension is platform dependent for some image types.
_PREFERRED_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpeg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
}


def random_string(length: int = 8) -> str:
    return "".join(random.choice(_RANDOM_ALPHABET) for _ in range(length))


def extension_for_content_type(content_type: str) -> str | None:
    """File extension (with dot) for a ``Content-Type`` header value."""
    mime = content_type.split(";", 1)[0].strip().lower()
    if not mime:
        return None
    return _PREFERRED_EXTENSIONS.get(mime) or mimetypes.guess_extension(mime)


def build_image_client(config: ExportConfig) -> httpx.Client:
    """Client for image downloads, honouring the configured timeout and proxy.

    No Notion credentials are attached: image URLs are pre-signed or public.
    """
    return httpx.Client(
        timeout=httpx.Timeout(config.timeout_seconds),
        proxy=config.http_proxy,
        follow_redirects=True,
    )


def download_image(
    url: str,
    dest_dir: str | Path,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
) -> str:
    """Download *url* into *dest_dir* and return the stored filename.

    Parameters
    ----------
    url:
        Image URL (Notion-hosted or external).
    dest_dir:
        Existing directory that receives the file.
    client:
        Optional :class:`httpx.Client`; a short-lived one is created
        otherwise.
    timeout:
        Request timeout when no client is supplied.

    Raises
    ------
    NotiondocsAssetError
        On a network failure, a non-200 status, an unknown content type or
        a write failure.
    """
    owns_client = client is None
    http = client if client is not None else httpx.Client(
        timeout=httpx.Timeout(timeout), follow_redirects=True,
    )
    try:
        with http.stream("GET", url) as response:
            if response.status_code != 200:
                raise NotiondocsAssetError(
                    message=f"Failed to download image: status code {response.status_code}",
                    context={"url": url, "status_code": response.status_code},
                )
            content_type = response.headers.get("content-type", "")
            ext = extension_for_content_type(content_type)
            if not ext:
                raise NotiondocsAssetError(
                    message=(
                        "Failed to determine file extension for content type: "
                        f"{content_type!r}"
                    ),
                    context={"url": url, "content_type": content_type},
                )

            filename = f"{random_string(8)}_{time.time_ns()}{ext}"
            target = Path(dest_dir) / filename
            try:
                with target.open("wb") as out:
                    for chunk in response.iter_bytes():
                        out.write(chunk)
            except OSError as exc:
                raise NotiondocsAssetError(
                    message=f"Failed to write image to {target}: {exc}",
                    context={"url": url, "path": str(target)},
                    cause=exc,
                ) from exc
    except httpx.HTTPError as exc:
        raise NotiondocsAssetError(
            message=f"Failed to download image: {exc}",
            context={"url": url},
            cause=exc,
        ) from exc
    finally:
        if owns_client:
            http.close()

    return filename
