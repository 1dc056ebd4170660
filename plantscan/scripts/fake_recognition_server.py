"""
Fake plant recognition server for running the pipeline without the real model.

Serves POST /upload on port 5000 and answers according to FAKE_MODE:
  flat    [{"plantName": "Tomato", "disease": "Blight", "confidence": 0.92}]
  nested  [{"plant": {"name": ..., "scientificName": ..., ...}}]
  empty   []
  error   {"error": "unrecognized image"}
  down    HTTP 503, no body

Usage:
    FAKE_MODE=flat python plantscan/scripts/fake_recognition_server.py
    RECOGNITION_URL=http://localhost:5000 uvicorn plantscan.services.api:app
"""

import os
import time

import uvicorn
from fastapi import FastAPI, File, UploadFile
from fastapi.responses import Response

app = FastAPI(title="fake-recognition-server")

MODE = os.getenv("FAKE_MODE", "flat")
DELAY_S = float(os.getenv("FAKE_DELAY", "0.5"))

_RESPONSES = {
    "flat": [{"plantName": "Tomato", "disease": "Blight", "confidence": 0.92}],
    "nested": [{
        "plant": {
            "name": "Tomato",
            "scientificName": "Solanum lycopersicum",
            "commonNames": ["tomato", "love apple"],
            "leafDescription": "Compound leaves with serrated leaflets",
            "additionalInfo": "Susceptible to early blight in humid weather",
        },
        "disease": "Early Blight",
        "confidence": 0.87,
    }],
    "empty": [],
    "error": {"error": "unrecognized image"},
}


@app.post("/upload")
async def upload(image: UploadFile = File(...)):
    data = await image.read()
    print(f"[recognition] {image.filename} {image.content_type} {len(data)} bytes (mode={MODE})")
    time.sleep(DELAY_S)
    if MODE == "down":
        return Response(status_code=503)
    return _RESPONSES.get(MODE, _RESPONSES["flat"])


if __name__ == "__main__":
    print(f"Fake recognition server starting on http://localhost:5000 (mode={MODE})")
    uvicorn.run(app, host="0.0.0.0", port=5000)
