import base64

import numpy as np
import pytest

from plantscan.adapters.camera.encoder import (
    decode_frame, encode_frame, from_data_url, sniff_media_type, to_data_url,
)
from plantscan.orchestrator.contracts import CapturedFrame, EncodedPayload
from plantscan.orchestrator.errors import EncodingError


def _solid_frame(w=10, h=10, color=(0, 0, 255)):
    pixels = np.empty((h, w, 3), dtype=np.uint8)
    pixels[:] = color
    return CapturedFrame.from_array(pixels)


def test_png_encoding_is_lossless():
    frame = _solid_frame()
    payload = encode_frame(frame)

    assert payload.media_type == "image/png"
    assert sniff_media_type(payload.data) == "image/png"
    assert payload.filename == "capture.png"

    back = decode_frame(payload)
    assert (back.width, back.height) == (10, 10)
    assert np.array_equal(back.pixels, frame.pixels)


def test_png_encoding_is_deterministic():
    assert encode_frame(_solid_frame()).data == encode_frame(_solid_frame()).data


def test_jpeg_payload_declares_jpeg():
    payload = encode_frame(_solid_frame(32, 16), "image/jpeg", jpeg_quality=90)
    assert payload.media_type == "image/jpeg"
    assert sniff_media_type(payload.data) == "image/jpeg"
    assert payload.filename == "capture.jpg"


def test_unsupported_target_type_is_rejected():
    with pytest.raises(EncodingError):
        encode_frame(_solid_frame(), "image/gif")


def test_empty_frame_is_rejected():
    empty = CapturedFrame(pixels=np.zeros((0, 0, 3), dtype=np.uint8), width=0, height=0)
    with pytest.raises(EncodingError):
        encode_frame(empty)


def test_frame_size_must_match_pixel_buffer():
    frame = CapturedFrame(pixels=np.zeros((10, 10, 3), dtype=np.uint8), width=20, height=10)
    with pytest.raises(EncodingError):
        encode_frame(frame)


def test_data_url_conversion_is_byte_exact():
    payloads = [
        encode_frame(_solid_frame()),
        EncodedPayload(data=b"hello", media_type="image/png"),
        EncodedPayload(data=bytes(range(256)), media_type="application/octet-stream"),
    ]
    for payload in payloads:
        url = to_data_url(payload)
        decoded = from_data_url(url)
        assert decoded.data == payload.data
        assert decoded.media_type == payload.media_type
        assert to_data_url(decoded) == url


def test_media_type_comes_from_the_declared_type():
    payload = from_data_url("data:image/webp;base64," + base64.b64encode(b"\x00\x01").decode())
    assert payload.media_type == "image/webp"
    assert payload.data == b"\x00\x01"
    assert payload.size == 2


@pytest.mark.parametrize("bad", [
    "data:image/png;base64",                 # no separator
    "image/png;base64,aGVsbG8=",             # not a data URL
    "data:;base64,aGVsbG8=",                 # no media type
    "data:image/png,hello",                  # not base64
    "data:image/png;base64,@@@@",            # invalid alphabet
    "data:image/png;base64,aGVsbG8",         # bad padding
    "data:imagepng;base64,aGVsbG8=",         # malformed media type
    "data:image/png;base64,",                # empty body
])
def test_malformed_data_urls_raise(bad):
    with pytest.raises(EncodingError):
        from_data_url(bad)


def test_declared_type_must_match_image_signature():
    png = encode_frame(_solid_frame()).data
    with pytest.raises(EncodingError):
        from_data_url("data:image/jpeg;base64," + base64.b64encode(png).decode())


def test_undecodable_payload_raises():
    with pytest.raises(EncodingError):
        decode_frame(EncodedPayload(data=b"not an image", media_type="image/png"))
