"""Shared fixtures and fakes for the plantscan test suite."""

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from plantscan.adapters.camera.mock_camera import MockCamera
from plantscan.adapters.recognition.base import RecognitionClient
from plantscan.adapters.recognition.http_recognition import HttpRecognitionClient
from plantscan.adapters.recognition.mock_recognition import MockRecognitionClient
from plantscan.adapters.speech.queue_speech import QueueSpeechSource
from plantscan.orchestrator.state_machine import PipelineController
from plantscan.services.event_log import EventLog

RED = (0, 0, 255)   # BGR


class GatedRecognition(RecognitionClient):
    """Holds every upload until `gate` is set, so tests can act mid-flight."""

    def __init__(self, findings=()):
        self.gate = asyncio.Event()
        self.findings = tuple(findings)
        self.submitted = []

    async def submit(self, payload):
        self.submitted.append(payload)
        await self.gate.wait()
        return self.findings


class GatedCamera(MockCamera):
    """Holds every camera open until `gate` is set."""

    def __init__(self, event_log, **kwargs):
        super().__init__(event_log, **kwargs)
        self.gate = asyncio.Event()

    async def _open(self, facing, width, height):
        await self.gate.wait()
        return await super()._open(facing, width, height)


def json_transport(body=None, status_code: int = 200, seen: dict | None = None):
    """httpx transport answering every request with `body` as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers.get("content-type", "")
            seen["body"] = request.content
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


async def settle(predicate=None, ticks: int = 200) -> bool:
    """Let pending tasks run until predicate() holds (or ticks run out)."""
    for _ in range(ticks):
        if predicate is not None and predicate():
            return True
        await asyncio.sleep(0)
    return bool(predicate and predicate())


@pytest.fixture()
def events():
    return EventLog()


@pytest.fixture()
def camera(events):
    return MockCamera(events)


@pytest.fixture()
def recognition(events):
    return MockRecognitionClient(events)


@pytest.fixture()
def gated():
    return GatedRecognition()


@pytest.fixture()
def controller(camera, recognition, events):
    return PipelineController(camera, recognition, events)


@pytest.fixture()
def speech(events):
    return QueueSpeechSource(events)


def http_controller(events, camera, body=None, status_code: int = 200, seen: dict | None = None):
    client = HttpRecognitionClient(events, base_url="http://recognizer.test",
                                   transport=json_transport(body, status_code, seen))
    return PipelineController(camera, client, events)
