import os
from dotenv import load_dotenv

load_dotenv(override=False)


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


# Recognition service base URL; the client posts to <RECOGNITION_URL>/upload
RECOGNITION_URL = os.getenv("RECOGNITION_URL", "https://localhost:5000")
RECOGNITION_TIMEOUT = float(os.getenv("RECOGNITION_TIMEOUT", "15"))
# http | mock
RECOGNITION_ADAPTER = os.getenv("RECOGNITION_ADAPTER", "http").lower()

# cv2 | mock
CAMERA_ADAPTER = os.getenv("CAMERA_ADAPTER", "cv2").lower()
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))
# Device indices for rear ("environment") and front ("user") cameras when known
CAMERA_REAR_INDEX = _optional_int("CAMERA_REAR_INDEX")
CAMERA_FRONT_INDEX = _optional_int("CAMERA_FRONT_INDEX")
CAMERA_FACING = os.getenv("CAMERA_FACING", "environment").lower()
CAMERA_WIDTH = int(os.getenv("CAMERA_WIDTH", "1280"))
CAMERA_HEIGHT = int(os.getenv("CAMERA_HEIGHT", "720"))

FRAME_MEDIA_TYPE = os.getenv("FRAME_MEDIA_TYPE", "image/png").lower()
JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "85"))

SPEECH_LANG = os.getenv("SPEECH_LANG", "en-US")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
