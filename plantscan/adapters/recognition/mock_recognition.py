import asyncio

from plantscan.adapters.recognition.base import RecognitionClient
from plantscan.orchestrator.contracts import EncodedPayload, PlantFinding

DEFAULT_FINDINGS = (
    PlantFinding(plant_name="Tomato", disease="Early Blight", confidence=0.92),
)


class MockRecognitionClient(RecognitionClient):
    """Returns canned findings, or raises `fail_with` when set."""

    def __init__(self, event_log, findings=DEFAULT_FINDINGS, fail_with: Exception | None = None,
                 delay: float = 0.0):
        self.events = event_log
        self.findings = tuple(findings)
        self.fail_with = fail_with
        self.delay = delay
        self.submitted: list[EncodedPayload] = []

    async def submit(self, payload: EncodedPayload) -> tuple[PlantFinding, ...]:
        self.submitted.append(payload)
        self.events.log(f"mock_recognition: got {payload.media_type} ({payload.size} bytes)")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return self.findings
