import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from plantscan.orchestrator.errors import EncodingError

Facing = Literal["environment", "user"]

NO_FINDINGS_MESSAGE = "No plant data available. Please capture an image and try again."

_session_ids = itertools.count(1)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


class SessionState(str, Enum):
    REQUESTED = "requested"
    ACTIVE = "active"
    RELEASED = "released"


@dataclass
class CaptureSession:
    facing: Facing
    requested_width: int
    requested_height: int
    width: int = 0                 # actual stream resolution, known once active
    height: int = 0
    device: Optional[int] = None   # device index actually opened
    state: SessionState = SessionState.REQUESTED
    handle: Any = field(default=None, repr=False)
    session_id: int = field(default_factory=lambda: next(_session_ids))

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE


@dataclass(frozen=True, eq=False)
class CapturedFrame:
    pixels: Any        # numpy uint8 array, H x W x 3, BGR
    width: int
    height: int

    @classmethod
    def from_array(cls, pixels) -> "CapturedFrame":
        h, w = pixels.shape[:2]
        return cls(pixels=pixels, width=int(w), height=int(h))


@dataclass(frozen=True)
class EncodedPayload:
    data: bytes
    media_type: str    # e.g. "image/png"

    def __post_init__(self):
        kind, sep, subtype = self.media_type.partition("/")
        if not (kind and sep and subtype):
            raise EncodingError(f"invalid media type {self.media_type!r}")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def filename(self) -> str:
        ext = _EXTENSIONS.get(self.media_type, self.media_type.partition("/")[2])
        return f"capture.{ext}"


@dataclass(frozen=True)
class PlantFinding:
    plant_name: str
    disease: Optional[str] = None
    confidence: Optional[float] = None
    scientific_name: Optional[str] = None
    common_names: tuple[str, ...] = ()
    leaf_description: Optional[str] = None
    additional_info: Optional[str] = None


class Phase(str, Enum):
    IDLE = "idle"
    CAMERA_STARTING = "camera_starting"
    CAMERA_ACTIVE = "camera_active"
    CAPTURING = "capturing"
    UPLOADING = "uploading"
    RESULT_READY = "result_ready"
    FAILED = "failed"


# Phases with an awaited transition in flight; new actions are rejected
BUSY_PHASES = frozenset({Phase.CAMERA_STARTING, Phase.CAPTURING, Phase.UPLOADING})


@dataclass(frozen=True)
class PipelineState:
    phase: Phase = Phase.IDLE
    last_image: Optional[EncodedPayload] = None
    results: tuple[PlantFinding, ...] = ()
    error_message: Optional[str] = None

    @property
    def notice(self) -> Optional[str]:
        if self.phase is Phase.RESULT_READY and not self.results:
            return NO_FINDINGS_MESSAGE
        return None


@dataclass
class ActionResult:
    ok: bool
    phase: Phase
    error_code: Optional[str] = None
    error: Optional[str] = None
