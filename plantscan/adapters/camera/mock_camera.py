"""Mock camera: serves solid-colour synthetic frames, no hardware needed."""
import numpy as np

from plantscan.adapters.camera.base import CameraAdapter
from plantscan.orchestrator.contracts import CapturedFrame

LEAF_GREEN = (40, 140, 60)   # BGR


class MockCamera(CameraAdapter):
    def __init__(self, event_log, color=LEAF_GREEN, native_size: tuple[int, int] | None = None,
                 fail_with: Exception | None = None):
        super().__init__(event_log)
        self.color = color
        self.native_size = native_size   # (w, h); None honours the requested size
        self.fail_with = fail_with
        self.opened = 0
        self.released = 0

    async def _open(self, facing, width, height):
        if self.fail_with is not None:
            self.events.log(f"mock_camera: start fails with {type(self.fail_with).__name__}")
            raise self.fail_with
        w, h = self.native_size or (width, height)
        self.opened += 1
        self.events.log(f"mock_camera: opened ({facing} {w}x{h})")
        return {"size": (w, h)}, 0, w, h

    def _read(self, handle) -> CapturedFrame:
        w, h = handle["size"]
        pixels = np.empty((h, w, 3), dtype=np.uint8)
        pixels[:] = self.color
        return CapturedFrame(pixels=pixels, width=w, height=h)

    def _release(self, handle):
        self.released += 1
