import io

import pytest
from PIL import Image


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), (120, 180, 40)).save(buf, format="PNG")
    return buf.getvalue()
