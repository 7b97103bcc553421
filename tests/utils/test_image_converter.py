import base64
import io

import pytest
from PIL import Image

from src.utils.image_converter import to_base64, EncodingFailed


class TestToBase64:
    def test_raw_bytes_are_encoded_verbatim(self):
        data = b"\x89PNG\r\n\x1a\nfake-image-bytes"
        assert base64.b64decode(to_base64(data)) == data

    def test_binary_file_handle(self):
        data = b"jpeg-bytes"
        assert to_base64(io.BytesIO(data)) == base64.b64encode(data).decode("utf-8")

    def test_path_is_read_from_disk(self, tmp_path):
        image_path = tmp_path / "problem.png"
        image_path.write_bytes(b"from-disk")
        assert base64.b64decode(to_base64(image_path)) == b"from-disk"
        assert base64.b64decode(to_base64(str(image_path))) == b"from-disk"

    def test_pil_image_is_saved_as_png(self):
        img = Image.new("RGBA", (10, 10), color="red")
        decoded = base64.b64decode(to_base64(img))
        assert decoded.startswith(b"\x89PNG")
        assert Image.open(io.BytesIO(decoded)).mode == "RGB"

    def test_missing_file_fails(self, tmp_path):
        with pytest.raises(EncodingFailed):
            to_base64(tmp_path / "nope.png")

    def test_closed_handle_fails(self):
        handle = io.BytesIO(b"data")
        handle.close()
        with pytest.raises(EncodingFailed):
            to_base64(handle)

    def test_text_mode_handle_fails(self):
        with pytest.raises(EncodingFailed):
            to_base64(io.StringIO("not binary"))

    def test_empty_payload_fails(self):
        with pytest.raises(EncodingFailed):
            to_base64(b"")

    def test_unsupported_type_fails(self):
        with pytest.raises(EncodingFailed):
            to_base64(12345)
