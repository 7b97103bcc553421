from __future__ import annotations
from pathlib import Path
from typing import Union, BinaryIO
import base64
import io
from PIL import Image


class EncodingFailed(RuntimeError):
    """Raised when an image source cannot be read into a transport payload."""


def _encode(raw: bytes) -> str:
    if not raw:
        raise EncodingFailed("Image source is empty")
    return base64.b64encode(raw).decode('utf-8')


def to_base64(image_data: Union[str, Path, bytes, BinaryIO, Image.Image]) -> str:
    if isinstance(image_data, (bytes, bytearray)):
        return _encode(bytes(image_data))

    elif isinstance(image_data, (str, Path)):
        path = Path(image_data)
        try:
            return _encode(path.read_bytes())
        except OSError as e:
            raise EncodingFailed(f"Could not read image file {image_data}: {e}") from e

    elif isinstance(image_data, Image.Image):
        if image_data.mode in ('RGBA', 'P'):
            image_data = image_data.convert('RGB')

        buffer = io.BytesIO()
        try:
            image_data.save(buffer, format='PNG')
        except (OSError, ValueError) as e:
            raise EncodingFailed(f"Could not serialize image: {e}") from e
        return _encode(buffer.getvalue())

    elif hasattr(image_data, 'read'):
        # file handles must be complete and readable; a closed handle raises ValueError
        try:
            raw = image_data.read()
        except (OSError, ValueError) as e:
            raise EncodingFailed(f"Could not read image stream: {e}") from e
        if not isinstance(raw, (bytes, bytearray)):
            raise EncodingFailed("Image stream must be opened in binary mode")
        return _encode(bytes(raw))

    else:
        raise EncodingFailed(f"Unsupported image data type: {type(image_data)}")
