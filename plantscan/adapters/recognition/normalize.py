"""
Normalize recognition-service JSON into PlantFinding tuples.

Accepted bodies:
  [{"plantName": ..., "disease": ..., "confidence": ...}, ...]      flat
  [{"plant": {"name": ..., "scientificName": ..., ...}}, ...]       nested
  {"plant": {...}}                                                   single nested
  {"error": "..."}                                                   -> ServiceReportedFailure
An empty list is a valid "no findings" answer.
"""
from typing import Any

from plantscan.orchestrator.contracts import PlantFinding
from plantscan.orchestrator.errors import ServiceReportedFailure

UNEXPECTED_RESPONSE = "Unexpected response from recognition service"


def normalize_response(body: Any) -> tuple[PlantFinding, ...]:
    if isinstance(body, dict):
        if body.get("error"):
            raise ServiceReportedFailure(str(body["error"]))
        if isinstance(body.get("plant"), dict):
            return (_finding(body),)
        raise ServiceReportedFailure(UNEXPECTED_RESPONSE)

    if isinstance(body, list):
        return tuple(_finding(item) for item in body)

    raise ServiceReportedFailure(UNEXPECTED_RESPONSE)


def _finding(item: Any) -> PlantFinding:
    if not isinstance(item, dict):
        raise ServiceReportedFailure(UNEXPECTED_RESPONSE)

    plant = item.get("plant")
    if isinstance(plant, dict):
        name = plant.get("name") or plant.get("plantName")
        if not name:
            raise ServiceReportedFailure(UNEXPECTED_RESPONSE)
        return PlantFinding(
            plant_name=str(name),
            disease=_opt_str(item.get("disease", plant.get("disease"))),
            confidence=_confidence(item.get("confidence", plant.get("confidence"))),
            scientific_name=_opt_str(plant.get("scientificName")),
            common_names=tuple(str(n) for n in plant.get("commonNames") or ()),
            leaf_description=_opt_str(plant.get("leafDescription")),
            additional_info=_opt_str(plant.get("additionalInfo")),
        )

    name = item.get("plantName") or item.get("name")
    if not name:
        raise ServiceReportedFailure(UNEXPECTED_RESPONSE)
    return PlantFinding(
        plant_name=str(name),
        disease=_opt_str(item.get("disease")),
        confidence=_confidence(item.get("confidence")),
    )


def _opt_str(value) -> str | None:
    return None if value is None else str(value)


def _confidence(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
