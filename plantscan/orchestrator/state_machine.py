"""
Pipeline controller: the only owner of PipelineState.

  Idle --begin_capture--> CameraStarting --(ready)--> CameraActive
  CameraActive --take_snapshot--> Capturing --(encoded)--> Uploading
  Uploading --> ResultReady | Failed
  Failed / ResultReady --begin_capture--> CameraStarting

Manual controls and voice commands call the same entry points. Actions that
arrive while an awaited transition is in flight are rejected with ERR_BUSY.
stop_camera() bumps the epoch, so a camera start or upload that completes
afterwards is discarded instead of applied.
"""
import logging
from dataclasses import replace
from typing import Callable

from plantscan.adapters.camera.encoder import encode_frame
from plantscan.orchestrator import errors
from plantscan.orchestrator.contracts import (
    BUSY_PHASES, ActionResult, CaptureSession, Facing, Phase, PipelineState,
)

logger = logging.getLogger(__name__)

Listener = Callable[[PipelineState], None]


class PipelineController:
    def __init__(self, camera, recognition, event_log, facing: Facing = "environment",
                 ideal_width: int = 1280, ideal_height: int = 720,
                 media_type: str = "image/png", jpeg_quality: int = 85):
        self.camera = camera
        self.recognition = recognition
        self.events = event_log
        self.facing = facing
        self.ideal_width = ideal_width
        self.ideal_height = ideal_height
        self.media_type = media_type
        self.jpeg_quality = jpeg_quality

        self._state = PipelineState()
        self._session: CaptureSession | None = None
        self._epoch = 0
        self._listeners: list[Listener] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def session(self) -> CaptureSession | None:
        return self._session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # ── actions ─────────────────────────────────────────────────────────────

    async def begin_capture(self) -> ActionResult:
        if self._state.phase in BUSY_PHASES:
            return self._reject("begin_capture")

        self._epoch += 1
        epoch = self._epoch
        self._release_session()
        self._transition(Phase.CAMERA_STARTING, results=(), error_message=None)

        try:
            session = await self.camera.start(self.facing, self.ideal_width, self.ideal_height)
        except errors.PipelineError as e:
            if epoch != self._epoch:
                return self._discarded("camera start failure")
            return self._fail(e)
        except Exception as e:
            if epoch != self._epoch:
                return self._discarded("camera start failure")
            return self._fail_unexpected("begin_capture", e)

        if epoch != self._epoch:
            self.camera.stop(session)
            return self._discarded("camera session")

        self._session = session
        self._transition(Phase.CAMERA_ACTIVE)
        return self._ok()

    async def take_snapshot(self) -> ActionResult:
        if self._state.phase in BUSY_PHASES:
            return self._reject("take_snapshot")

        epoch = self._epoch
        try:
            if self._state.phase is not Phase.CAMERA_ACTIVE or self._session is None:
                raise errors.NoActiveSession(f"take_snapshot in phase {self._state.phase.value}")
            self._transition(Phase.CAPTURING)
            frame = self.camera.capture_frame(self._session)
            payload = encode_frame(frame, self.media_type, self.jpeg_quality)
        except errors.PipelineError as e:
            return self._fail(e)
        except Exception as e:
            return self._fail_unexpected("take_snapshot", e)

        self.events.log(f"captured {frame.width}x{frame.height} -> {payload.media_type} {payload.size} bytes")
        self._transition(Phase.UPLOADING, last_image=payload, results=(), error_message=None)

        try:
            findings = await self.recognition.submit(payload)
        except errors.PipelineError as e:
            if epoch != self._epoch:
                return self._discarded("upload failure")
            return self._fail(e)
        except Exception as e:
            if epoch != self._epoch:
                return self._discarded("upload failure")
            return self._fail_unexpected("take_snapshot", e)

        if epoch != self._epoch:
            return self._discarded("upload response")

        self._transition(Phase.RESULT_READY, results=tuple(findings), error_message=None)
        return self._ok()

    def stop_camera(self) -> ActionResult:
        """Release the camera unconditionally; pending outcomes are discarded."""
        self._epoch += 1
        pending = self._state.phase in BUSY_PHASES
        self._release_session()
        # a camera start still in flight holds a requested session
        self.camera.stop(self.camera.current_session)
        if pending:
            self.events.log(f"stop_camera: abandoning in-flight {self._state.phase.value}")
        self._transition(Phase.IDLE)
        return self._ok()

    def report_error(self, error: errors.PipelineError):
        """Surface an out-of-band failure (e.g. speech) without changing phase."""
        self.events.log(f"report_error {error.code}: {error}", logging.WARNING)
        self._state = replace(self._state, error_message=error.user_message)
        self._notify()

    def shutdown(self):
        self.events.log("shutdown: releasing camera")
        self.stop_camera()

    # ── internals ───────────────────────────────────────────────────────────

    def _release_session(self):
        if self._session is not None:
            self.camera.stop(self._session)
            self._session = None

    def _transition(self, phase: Phase, **changes):
        prev = self._state.phase
        self._state = replace(self._state, phase=phase, **changes)
        if prev is not phase:
            self.events.log(f"phase {prev.value} -> {phase.value}")
        self._notify()

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("state listener %r failed", listener)

    def _ok(self) -> ActionResult:
        return ActionResult(ok=True, phase=self._state.phase)

    def _reject(self, action: str) -> ActionResult:
        self.events.log(f"{action} rejected: busy ({self._state.phase.value})")
        return ActionResult(ok=False, phase=self._state.phase, error_code=errors.ERR_BUSY,
                            error=f"busy: {self._state.phase.value}")

    def _discarded(self, what: str) -> ActionResult:
        self.events.log(f"discarding stale {what}")
        return ActionResult(ok=False, phase=self._state.phase, error_code=errors.ERR_SUPERSEDED)

    def _fail(self, e: errors.PipelineError) -> ActionResult:
        self.events.log(f"error {e.code}: {e}", logging.WARNING)
        self._transition(Phase.FAILED, results=(), error_message=e.user_message)
        return ActionResult(ok=False, phase=self._state.phase, error_code=e.code, error=e.user_message)

    def _fail_unexpected(self, action: str, e: Exception) -> ActionResult:
        logger.exception("%s: unexpected error", action)
        return self._fail(errors.PipelineError(f"{type(e).__name__}: {e}"))
