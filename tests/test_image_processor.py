from __future__ import annotations

import base64
import io

from PIL import Image

from image_processor import DEFAULT_MIME_TYPE, DataUriEncoder


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_encode_file_builds_base64_data_uri(tmp_path) -> None:
    data = b"\x89PNG fake image bytes"
    path = tmp_path / "icon.png"
    path.write_bytes(data)

    uri = DataUriEncoder().encode_file(str(path))

    assert uri == "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def test_mime_type_from_extension() -> None:
    encoder = DataUriEncoder()
    assert encoder.get_mime_type("a/b/photo.JPG") == "image/jpeg"
    assert encoder.get_mime_type("icons.svg") == "image/svg+xml"
    assert encoder.get_mime_type("font.woff2") == "font/woff2"


def test_mime_type_sniffed_when_name_has_no_extension(tmp_path) -> None:
    path = tmp_path / "logo"
    path.write_bytes(_png_bytes())

    uri = DataUriEncoder().encode_file(str(path))

    assert uri.startswith("data:image/png;base64,")


def test_unknown_content_falls_back_to_octet_stream() -> None:
    encoder = DataUriEncoder()
    assert encoder.sniff_image_type(b"not an image at all") is None
    assert encoder.get_mime_type("blob", b"not an image at all") == DEFAULT_MIME_TYPE
