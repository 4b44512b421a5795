import base64
import binascii
import io
import re
from typing import Union

from PIL import Image, UnidentifiedImageError

ImagePayload = Union[bytes, str, Image.Image]

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(;[\w=-]+)*;base64,(?P<data>.*)$", re.S)


class ImageDecodeError(ValueError):
    pass


def decode_base64_image(value: str) -> bytes:
    """Accepts a data URL (as produced by a browser FileReader) or a bare base64 string."""
    m = _DATA_URL.match(value.strip())
    data = m.group("data") if m else value.strip()
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {e}") from e


def decode_image(payload: ImagePayload) -> Image.Image:
    if isinstance(payload, Image.Image):
        return payload
    if isinstance(payload, str):
        payload = decode_base64_image(payload)
    if not payload:
        raise ImageDecodeError("Empty image payload")
    try:
        img = Image.open(io.BytesIO(payload))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Undecodable image: {e}") from e
    return img
