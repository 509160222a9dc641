"""Image block construction, including inline ``data:`` URI uploads."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional, Protocol

from mdnotion.blocks import (
    Block,
    BlockType,
    ImageBlock,
    ImageSource,
    TextBlock,
    UploadResult,
)

from .inline import plain_span
from .urls import is_likely_valid_url, sanitize_url

logger = logging.getLogger(__name__)

INVALID_IMAGE_PLACEHOLDER = "[invalid image url]"

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.IGNORECASE)
_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")
_MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


class ImageUploader(Protocol):
    """Stores decoded image bytes and reports where they ended up."""

    def __call__(
        self, mime: str, data: bytes, suggested_name: str
    ) -> Optional[UploadResult]: ...


class ImageBlockBuilder:
    """Turn a Markdown image target into an image block.

    Remote targets must be http(s) URLs. ``data:`` URIs are decoded and
    handed to ``uploader``; without one they cannot be resolved. Anything
    unresolvable becomes a paragraph holding the alt text.
    """

    def __init__(self, uploader: Optional[ImageUploader] = None) -> None:
        self._uploader = uploader

    def build_image_block(self, url: str, alt: str = "") -> Block:
        source = self._resolve_source(url, alt)
        if source is None:
            return fallback_paragraph(alt)
        return ImageBlock(source=source, caption=(plain_span(alt),))

    def _resolve_source(self, url: str, alt: str) -> Optional[ImageSource]:
        trimmed = url.strip()
        if trimmed.lower().startswith("data:"):
            return self._resolve_data_uri(trimmed, alt)
        return _external_source(trimmed)

    def _resolve_data_uri(self, uri: str, alt: str) -> Optional[ImageSource]:
        parsed = parse_data_uri(uri)
        if parsed is None:
            logger.debug("Ignoring malformed data URI image")
            return None
        if self._uploader is None:
            logger.debug("No uploader configured for data URI image")
            return None

        mime, data = parsed
        name = suggest_file_name(alt, mime)
        try:
            result = self._uploader(mime, data, name)
        except Exception:
            logger.warning(
                "Image uploader failed",
                exc_info=True,
                extra={"mime": mime, "file_name": name},
            )
            return None

        if result is None:
            return None
        if result.file_upload_id is not None:
            return ImageSource(file_upload_id=result.file_upload_id)
        return _external_source(result.external_url or "")


def _external_source(url: str) -> Optional[ImageSource]:
    sanitized = sanitize_url(url)
    if not is_likely_valid_url(sanitized):
        return None
    return ImageSource(external_url=sanitized)


def fallback_paragraph(alt: str) -> TextBlock:
    text = alt if alt.strip() else INVALID_IMAGE_PLACEHOLDER
    return TextBlock(BlockType.PARAGRAPH, rich_text=(plain_span(text),))


def parse_data_uri(uri: str) -> Optional[tuple[str, bytes]]:
    """Split a base64 ``data:`` URI into its lowercased mime type and bytes."""

    match = _DATA_URI_RE.match(uri.strip())
    if match is None:
        return None
    try:
        payload = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        return None
    return match.group(1).lower(), payload


def suggest_file_name(alt: str, mime: str) -> str:
    safe = _UNSAFE_NAME_RE.sub("_", alt if alt.strip() else "image").strip("_")
    if not safe:
        safe = "image"
    extension = _MIME_EXTENSIONS.get(mime.lower(), "bin")
    if safe.lower().endswith(f".{extension}"):
        return safe
    return f"{safe}.{extension}"


__all__ = [
    "INVALID_IMAGE_PLACEHOLDER",
    "ImageBlockBuilder",
    "ImageUploader",
    "fallback_paragraph",
    "parse_data_uri",
    "suggest_file_name",
]
