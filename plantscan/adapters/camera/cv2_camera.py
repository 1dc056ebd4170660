"""
OpenCV webcam capture adapter.

Facing maps to a device index: CAMERA_REAR_INDEX for "environment",
CAMERA_FRONT_INDEX for "user", CAMERA_INDEX as the default. When the
preferred device cannot be opened we fall back to the default one, and when
the requested resolution is not supported we accept what the device delivers.
"""
import asyncio
import os
import sys

import cv2

from plantscan import settings
from plantscan.adapters.camera.base import CameraAdapter
from plantscan.orchestrator.contracts import CapturedFrame
from plantscan.orchestrator.errors import DeviceUnavailable, PermissionDenied


def _device_permission_denied(index: int) -> bool:
    """On Linux a /dev/videoN node we cannot open means access was refused."""
    if not sys.platform.startswith("linux"):
        return False
    path = f"/dev/video{index}"
    return os.path.exists(path) and not os.access(path, os.R_OK | os.W_OK)


class CV2Camera(CameraAdapter):
    def __init__(self, event_log, index: int | None = None,
                 rear_index: int | None = None, front_index: int | None = None):
        super().__init__(event_log)
        self._index = index if index is not None else settings.CAMERA_INDEX
        self._facing_index = {
            "environment": rear_index if rear_index is not None else settings.CAMERA_REAR_INDEX,
            "user": front_index if front_index is not None else settings.CAMERA_FRONT_INDEX,
        }

    def _candidates(self, facing: str) -> list[int]:
        preferred = self._facing_index.get(facing)
        if preferred is None or preferred == self._index:
            return [self._index]
        return [preferred, self._index]

    async def _open(self, facing, width, height):
        denied = False
        for index in self._candidates(facing):
            if _device_permission_denied(index):
                self.events.log(f"cv2_camera: no permission for device {index}")
                denied = True
                continue
            cap = await asyncio.to_thread(self._open_device, index, width, height)
            if cap is None:
                self.events.log(f"cv2_camera: failed to open device {index}")
                continue
            actual_w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or width
            actual_h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or height
            if (actual_w, actual_h) != (width, height):
                self.events.log(f"cv2_camera: device {index} gives {actual_w}x{actual_h}, not {width}x{height}")
            if index != self._candidates(facing)[0]:
                self.events.log(f"cv2_camera: {facing} camera unavailable, using default device {index}")
            return cap, index, actual_w, actual_h

        if denied:
            raise PermissionDenied("camera device exists but access was refused")
        raise DeviceUnavailable(f"no camera could be opened (tried {self._candidates(facing)})")

    @staticmethod
    def _open_device(index: int, width: int, height: int):
        cap = cv2.VideoCapture(index)
        if not cap.isOpened():
            cap.release()
            return None
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        return cap

    def _read(self, handle) -> CapturedFrame:
        ret, frame = handle.read()
        if not ret or frame is None:
            self.events.log("cv2_camera: frame capture failed")
            raise DeviceUnavailable("camera returned no frame")
        return CapturedFrame.from_array(frame)

    def _release(self, handle):
        if handle.isOpened():
            handle.release()
