"""Render cache for page export.

Decoded images and resolved font handles are memoized per export so that
repeated sources (the same logo on every page, one font family for all text)
are only loaded once.
"""

from __future__ import annotations

import base64
import hashlib
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import unquote_to_bytes

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtGui import QImage, QImageReader

from pagemapper.services.qt_page import QtFont


class ImageLoadError(ValueError):
    pass


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """Payload bytes and mime type of a 'data:' URL."""
    header, sep, payload = data_url.partition(",")
    if not header.startswith("data:") or not sep:
        raise ImageLoadError("Invalid data URL")
    mime = header[5:].split(";")[0]
    if ";base64" in header:
        try:
            return base64.b64decode(payload.encode("ascii"), validate=False), mime
        except (ValueError, UnicodeEncodeError) as e:
            raise ImageLoadError(f"Invalid base64 payload in data URL: {e}") from e
    return unquote_to_bytes(payload), mime


class RenderCache:
    """Cache container for export artifacts."""

    def __init__(self) -> None:
        self._image_cache: Dict[str, QImage] = {}
        self._font_cache: Dict[Tuple, QtFont] = {}

    def clear(self) -> None:
        self._image_cache.clear()
        self._font_cache.clear()

    # ------------------------------------------------------------------
    # keys
    # ------------------------------------------------------------------
    @staticmethod
    def image_key(source: str) -> str:
        if source.startswith("data:"):
            return "data:" + hashlib.sha1(source.encode("utf-8")).hexdigest()
        return "file:" + str(Path(source).expanduser().resolve())

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    def image(self, source: str) -> QImage:
        key = self.image_key(source)
        cached = self._image_cache.get(key)
        if cached is not None:
            return cached
        img = self._load_image(source)
        self._image_cache[key] = img
        return img

    def font(self, family: str, factory: Optional[Callable[[str], QtFont]] = None) -> QtFont:
        key = (family,)
        cached = self._font_cache.get(key)
        if cached is not None:
            return cached
        handle = (factory or QtFont.from_family)(family)
        self._font_cache[key] = handle
        return handle

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    @staticmethod
    def _load_image(source: str) -> QImage:
        if not source:
            raise ImageLoadError("Image object has no source")

        if source.startswith("data:"):
            raw, _mime = decode_data_url(source)
            buf = QBuffer()
            buf.setData(QByteArray(raw))
            buf.open(QIODevice.ReadOnly)
            reader = QImageReader(buf)
        else:
            path = Path(source).expanduser()
            if not path.is_file():
                raise ImageLoadError(f"Image file not found: {source}")
            reader = QImageReader(str(path))

        reader.setAutoTransform(True)
        img = reader.read()
        if img.isNull():
            raise ImageLoadError(f"Image could not be decoded: {reader.errorString()}")
        return img
