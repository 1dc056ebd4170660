from pydantic import BaseModel
from typing import Literal, Optional

PhaseName = Literal[
    "idle", "camera_starting", "camera_active", "capturing",
    "uploading", "result_ready", "failed",
]


class FindingOut(BaseModel):
    plantName: str
    disease: Optional[str] = None
    confidence: Optional[float] = None
    scientificName: Optional[str] = None
    commonNames: list[str] = []
    leafDescription: Optional[str] = None
    additionalInfo: Optional[str] = None


class ActionResponse(BaseModel):
    ok: bool
    phase: PhaseName
    error_code: Optional[str] = None
    error: Optional[str] = None


class StatusResponse(BaseModel):
    phase: PhaseName
    image: Optional[str] = None             # data URL of the last captured frame
    results: list[FindingOut]
    error_message: Optional[str] = None
    notice: Optional[str] = None            # neutral "no findings" text, never an error
    camera: Optional[str] = None            # "<w>x<h>" of the active session
    voice: Literal["listening", "stopped"]
    logs: list[str]


class TranscriptRequest(BaseModel):
    text: str
    is_final: bool = True


class SpeechErrorRequest(BaseModel):
    error: str


class VoiceResponse(BaseModel):
    ok: bool
    voice: Literal["listening", "stopped"]
    changed: bool = True
