"""
Frame encoding for upload.

  encode_frame()   CapturedFrame  -> EncodedPayload (PNG by default, lossless)
  decode_frame()   EncodedPayload -> CapturedFrame
  to_data_url()    EncodedPayload -> "data:image/png;base64,..."
  from_data_url()  data URL       -> EncodedPayload (byte-exact)

Every failure raises EncodingError; a partial payload is never returned.
"""
import base64
import binascii

import cv2
import numpy as np

from plantscan.orchestrator.contracts import CapturedFrame, EncodedPayload
from plantscan.orchestrator.errors import EncodingError

_CV2_EXT = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}

_SIGNATURES = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
]


def sniff_media_type(data: bytes) -> str | None:
    """Best-effort media type from magic bytes; None when unknown."""
    for magic, media_type in _SIGNATURES:
        if data.startswith(magic):
            return media_type
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def encode_frame(frame: CapturedFrame, media_type: str = "image/png", jpeg_quality: int = 85) -> EncodedPayload:
    ext = _CV2_EXT.get(media_type)
    if ext is None:
        raise EncodingError(f"unsupported target media type {media_type!r}")

    pixels = frame.pixels
    if pixels is None or getattr(pixels, "size", 0) == 0:
        raise EncodingError("frame has no pixels")
    if tuple(pixels.shape[:2]) != (frame.height, frame.width):
        raise EncodingError(
            f"frame is {frame.width}x{frame.height} but pixel buffer is "
            f"{pixels.shape[1]}x{pixels.shape[0]}"
        )

    params = [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality] if media_type == "image/jpeg" else []
    try:
        ok, buf = cv2.imencode(ext, pixels, params)
    except cv2.error as e:
        raise EncodingError(f"cv2.imencode failed: {e}") from e
    if not ok:
        raise EncodingError(f"cv2.imencode could not produce {media_type}")
    return EncodedPayload(data=buf.tobytes(), media_type=media_type)


def decode_frame(payload: EncodedPayload) -> CapturedFrame:
    arr = np.frombuffer(payload.data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR) if arr.size else None
    if img is None:
        raise EncodingError(f"payload is not a decodable {payload.media_type} image")
    return CapturedFrame.from_array(img)


def to_data_url(payload: EncodedPayload) -> str:
    b64 = base64.b64encode(payload.data).decode("ascii")
    return f"data:{payload.media_type};base64,{b64}"


def from_data_url(data_url: str) -> EncodedPayload:
    header, sep, body = data_url.partition(",")
    if not sep:
        raise EncodingError("data URL has no ',' separator")
    if not header.startswith("data:"):
        raise EncodingError("not a data URL")

    meta = header[len("data:"):].split(";")
    media_type = meta[0].strip().lower()
    if not media_type:
        raise EncodingError("data URL declares no media type")
    if "base64" not in (m.strip().lower() for m in meta[1:]):
        raise EncodingError("data URL is not base64-encoded")

    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"invalid base64 body: {e}") from e
    if not data:
        raise EncodingError("data URL has an empty body")

    actual = sniff_media_type(data)
    if actual is not None and actual != media_type:
        raise EncodingError(f"data URL declares {media_type} but contains {actual}")
    return EncodedPayload(data=data, media_type=media_type)
