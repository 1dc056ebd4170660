from abc import ABC, abstractmethod
from typing import Any

from plantscan.orchestrator.contracts import CaptureSession, CapturedFrame, Facing, SessionState
from plantscan.orchestrator.errors import NoActiveSession


class CameraAdapter(ABC):
    """Owns the camera handle. At most one session is active at a time."""

    def __init__(self, event_log):
        self.events = event_log
        self._session: CaptureSession | None = None

    @property
    def current_session(self) -> CaptureSession | None:
        """The requested or active session, if any."""
        return self._session

    @property
    def active_session(self) -> CaptureSession | None:
        if self._session is not None and self._session.active:
            return self._session
        return None

    async def start(self, preferred_facing: Facing = "environment",
                    ideal_width: int = 1280, ideal_height: int = 720) -> CaptureSession:
        """Open the camera. Raises DeviceUnavailable or PermissionDenied."""
        if self._session is not None:
            # never leave the previous handle orphaned
            self.stop(self._session)

        session = CaptureSession(facing=preferred_facing,
                                 requested_width=ideal_width, requested_height=ideal_height)
        self._session = session
        try:
            handle, device, width, height = await self._open(preferred_facing, ideal_width, ideal_height)
        except BaseException:
            session.state = SessionState.RELEASED
            if self._session is session:
                self._session = None
            raise

        if session.state is SessionState.RELEASED:
            # stopped while the device was still opening
            self._release(handle)
            raise NoActiveSession(f"session {session.session_id} was stopped while opening")

        session.handle = handle
        session.device = device
        session.width, session.height = width, height
        session.state = SessionState.ACTIVE
        self.events.log(
            f"{self.name}: session {session.session_id} active "
            f"(device={device} {width}x{height}, asked {preferred_facing} {ideal_width}x{ideal_height})"
        )
        return session

    def capture_frame(self, session: CaptureSession | None) -> CapturedFrame:
        if session is None or not session.active or session is not self._session:
            raise NoActiveSession("capture requested without an active camera session")
        return self._read(session.handle)

    def stop(self, session: CaptureSession | None):
        if session is None or session.state is SessionState.RELEASED:
            return
        handle = session.handle
        session.state = SessionState.RELEASED
        session.handle = None
        if session is self._session:
            self._session = None
        if handle is not None:
            self._release(handle)
        self.events.log(f"{self.name}: session {session.session_id} released")

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def _open(self, facing: Facing, width: int, height: int) -> tuple[Any, int | None, int, int]:
        """Return (handle, device index, actual width, actual height)."""
        ...

    @abstractmethod
    def _read(self, handle) -> CapturedFrame:
        ...

    @abstractmethod
    def _release(self, handle):
        ...
