"""
Data URI encoding for CssImageEmbedder.
"""

import base64
import io
import logging
import mimetypes
import os
from typing import Optional

from PIL import Image, UnidentifiedImageError


DEFAULT_MIME_TYPE = "application/octet-stream"

# Extensions commonly referenced from stylesheets
MIME_TYPES_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".cur": "image/x-icon",
    ".avif": "image/avif",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
}


class DataUriEncoder:
    """Turns files on disk into base64 data URIs."""

    def __init__(self):
        self.logger = logging.getLogger("css-image-embedder")

        # Initialize MIME types
        mimetypes.init()

    def encode_file(self, path: str) -> str:
        """
        Read a file and encode it as a data URI.

        Args:
            path: Absolute path of an existing file

        Returns:
            str: The data URI, e.g. "data:image/png;base64,iVBOR..."
        """
        with open(path, "rb") as f:
            data = f.read()
        mime_type = self.get_mime_type(path, data)
        self.logger.debug(f"Encoding {path} as {mime_type} ({len(data)} bytes)")
        return self.encode(data, mime_type)

    @staticmethod
    def encode(data: bytes, mime_type: str) -> str:
        """Build a base64 data URI from raw bytes."""
        return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

    def get_mime_type(self, path: str, data: Optional[bytes] = None) -> str:
        """
        Determine the MIME type of a file.

        The extension is tried first, then the mimetypes registry, then
        the content itself is sniffed with Pillow.

        Args:
            path: The file path or URL to analyze
            data: The file content, used when the name says nothing

        Returns:
            str: The MIME type
        """
        _, ext = os.path.splitext(path)
        ext = ext.lower()
        if ext in MIME_TYPES_BY_EXTENSION:
            return MIME_TYPES_BY_EXTENSION[ext]

        mime_type, _ = mimetypes.guess_type(path)
        if mime_type:
            return mime_type

        if data:
            sniffed = self.sniff_image_type(data)
            if sniffed:
                return sniffed

        return DEFAULT_MIME_TYPE

    def sniff_image_type(self, data: bytes) -> Optional[str]:
        """
        Detect an image MIME type from the content.

        Args:
            data: The file data to check

        Returns:
            str: The MIME type, or None if Pillow does not recognize the data
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                return Image.MIME.get(img.format)
        except (UnidentifiedImageError, OSError) as e:
            self.logger.debug(f"Could not identify image data: {e}")
            return None
