import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from plantscan import settings
from plantscan.adapters.camera.encoder import to_data_url
from plantscan.adapters.speech.queue_speech import QueueSpeechSource
from plantscan.orchestrator.contracts import ActionResult, PipelineState
from plantscan.orchestrator.state_machine import PipelineController
from plantscan.orchestrator.voice import VoiceCommandRouter
from plantscan.services.event_log import EventLog
from plantscan.services.models import (
    ActionResponse, FindingOut, SpeechErrorRequest, StatusResponse,
    TranscriptRequest, VoiceResponse,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    datefmt="%H:%M:%S",
)
for _noisy in ("httpx", "httpcore"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)


def build_camera(events: EventLog):
    # CAMERA_ADAPTER: cv2 | mock  (default: cv2)
    if settings.CAMERA_ADAPTER == "mock":
        from plantscan.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(events)
    else:
        from plantscan.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(events)
    events.log(f"camera adapter: {type(camera).__name__}")
    return camera


def build_recognition(events: EventLog):
    # RECOGNITION_ADAPTER: http | mock  (default: http)
    if settings.RECOGNITION_ADAPTER == "mock":
        from plantscan.adapters.recognition.mock_recognition import MockRecognitionClient
        client = MockRecognitionClient(events)
        events.log("recognition adapter: mock")
    else:
        from plantscan.adapters.recognition.http_recognition import HttpRecognitionClient
        client = HttpRecognitionClient(events, base_url=settings.RECOGNITION_URL,
                                       timeout=settings.RECOGNITION_TIMEOUT)
        events.log(f"recognition adapter: http -> {client.url}")
    return client


def build_controller(events: EventLog) -> PipelineController:
    return PipelineController(
        camera=build_camera(events),
        recognition=build_recognition(events),
        event_log=events,
        facing=settings.CAMERA_FACING,
        ideal_width=settings.CAMERA_WIDTH,
        ideal_height=settings.CAMERA_HEIGHT,
        media_type=settings.FRAME_MEDIA_TYPE,
        jpeg_quality=settings.JPEG_QUALITY,
    )


def _action_response(rr: ActionResult) -> ActionResponse:
    return ActionResponse(ok=rr.ok, phase=rr.phase.value, error_code=rr.error_code, error=rr.error)


def _status_response(state: PipelineState, controller: PipelineController, voice: VoiceCommandRouter,
                     events: EventLog) -> StatusResponse:
    session = controller.session
    return StatusResponse(
        phase=state.phase.value,
        image=to_data_url(state.last_image) if state.last_image else None,
        results=[
            FindingOut(
                plantName=f.plant_name,
                disease=f.disease,
                confidence=f.confidence,
                scientificName=f.scientific_name,
                commonNames=list(f.common_names),
                leafDescription=f.leaf_description,
                additionalInfo=f.additional_info,
            )
            for f in state.results
        ],
        error_message=state.error_message,
        notice=state.notice,
        camera=f"{session.width}x{session.height}" if session is not None and session.active else None,
        voice=voice.state.value,
        logs=events.recent(),
    )


def create_app(controller: PipelineController | None = None,
               speech: QueueSpeechSource | None = None,
               events: EventLog | None = None) -> FastAPI:
    """Wire the pipeline and expose its entry points over HTTP."""
    events = events or EventLog()
    controller = controller or build_controller(events)
    speech = speech or QueueSpeechSource(events)
    voice = VoiceCommandRouter(controller, speech, events, lang=settings.SPEECH_LANG)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        # teardown: camera is released even if an upload is still pending
        await voice.stop()
        controller.shutdown()
        await controller.recognition.aclose()

    app = FastAPI(title="plantscan", lifespan=lifespan)
    app.state.controller = controller
    app.state.voice = voice
    app.state.speech = speech
    app.state.events = events

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        return _status_response(controller.state, controller, voice, events)

    @app.post("/camera/start", response_model=ActionResponse)
    async def camera_start():
        return _action_response(await controller.begin_capture())

    @app.post("/camera/stop", response_model=ActionResponse)
    def camera_stop():
        return _action_response(controller.stop_camera())

    @app.post("/capture", response_model=ActionResponse)
    async def capture():
        return _action_response(await controller.take_snapshot())

    @app.post("/voice/start", response_model=VoiceResponse)
    async def voice_start():
        changed = voice.start()
        events.log("VOICE start" if changed else "VOICE start ignored: already listening")
        return VoiceResponse(ok=True, voice=voice.state.value, changed=changed)

    @app.post("/voice/stop", response_model=VoiceResponse)
    async def voice_stop():
        was_listening = voice.listening
        await voice.stop()
        events.log("VOICE stop")
        return VoiceResponse(ok=True, voice=voice.state.value, changed=was_listening)

    @app.post("/voice/transcript", response_model=VoiceResponse)
    async def voice_transcript(req: TranscriptRequest):
        if not voice.listening:
            events.log(f"VOICE transcript dropped (not listening): {req.text}")
            return VoiceResponse(ok=False, voice=voice.state.value, changed=False)
        speech.push_transcript(req.text, is_final=req.is_final)
        return VoiceResponse(ok=True, voice=voice.state.value, changed=False)

    @app.post("/voice/error", response_model=VoiceResponse)
    async def voice_error(req: SpeechErrorRequest):
        if not voice.listening:
            return VoiceResponse(ok=False, voice=voice.state.value, changed=False)
        speech.push_error(req.error)
        return VoiceResponse(ok=True, voice=voice.state.value, changed=False)

    @app.get("/health")
    def health():
        session = controller.session
        return {
            "api": True,
            "camera_adapter": type(controller.camera).__name__,
            "camera_active": bool(session is not None and session.active),
            "recognition_adapter": type(controller.recognition).__name__,
            "recognition_url": getattr(controller.recognition, "url", None),
            "voice": voice.state.value,
            "phase": controller.state.phase.value,
        }

    return app


app = create_app()
