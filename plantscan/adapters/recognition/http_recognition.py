"""
HTTP adapter for the plant recognition service.

  Request:  POST <base_url>/upload   multipart, field "image" = encoded frame
  Response: [{"plantName": ..., "disease": ..., "confidence": ...}]
            or {"error": "..."}
            or nested {"plant": {...}} objects (see normalize.py)

Network errors, timeouts and non-2xx answers without an {"error": ...} body
are TransportFailure; an {"error": ...} body is ServiceReportedFailure.
"""
import httpx

from plantscan.adapters.recognition.base import RecognitionClient
from plantscan.adapters.recognition.normalize import normalize_response
from plantscan.orchestrator.contracts import EncodedPayload, PlantFinding
from plantscan.orchestrator.errors import ServiceReportedFailure, TransportFailure

UPLOAD_PATH = "/upload"


class HttpRecognitionClient(RecognitionClient):
    def __init__(self, event_log, base_url: str, timeout: float = 15.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.events = event_log
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def url(self) -> str:
        return f"{self.base_url}{UPLOAD_PATH}"

    async def submit(self, payload: EncodedPayload) -> tuple[PlantFinding, ...]:
        files = {"image": (payload.filename, payload.data, payload.media_type)}
        self.events.log(f"http_recognition: POST {UPLOAD_PATH} ({payload.media_type}, {payload.size} bytes)")
        try:
            resp = await self._client.post(self.url, files=files)
        except httpx.TimeoutException as e:
            self.events.log(f"http_recognition: timeout after {self.timeout}s")
            raise TransportFailure(f"timeout: {e}") from e
        except httpx.HTTPError as e:
            self.events.log(f"http_recognition: transport error {type(e).__name__}: {e}")
            raise TransportFailure(str(e) or type(e).__name__) from e

        body = self._json_or_none(resp)

        if not resp.is_success:
            self.events.log(f"http_recognition: HTTP {resp.status_code} - {resp.text[:300]}")
            if isinstance(body, dict) and body.get("error"):
                raise ServiceReportedFailure(str(body["error"]))
            raise TransportFailure(f"HTTP {resp.status_code}")

        if body is None:
            self.events.log(f"http_recognition: unparseable body - {resp.text[:300]}")
            raise TransportFailure("response body is not JSON")

        findings = normalize_response(body)
        self.events.log(f"http_recognition: {len(findings)} finding(s)")
        return findings

    @staticmethod
    def _json_or_none(resp: httpx.Response):
        try:
            return resp.json()
        except ValueError:
            return None

    async def aclose(self):
        await self._client.aclose()
