import pytest

from plantscan.adapters.recognition.normalize import UNEXPECTED_RESPONSE, normalize_response
from plantscan.orchestrator.contracts import PlantFinding
from plantscan.orchestrator.errors import ServiceReportedFailure


def test_flat_list_is_preserved_verbatim():
    body = [
        {"plantName": "Tomato", "disease": "Blight", "confidence": 0.92},
        {"plantName": "Basil", "disease": "Healthy", "confidence": 1},
    ]
    assert normalize_response(body) == (
        PlantFinding(plant_name="Tomato", disease="Blight", confidence=0.92),
        PlantFinding(plant_name="Basil", disease="Healthy", confidence=1),
    )


def test_nested_plant_objects():
    body = [{
        "plant": {
            "name": "Tomato",
            "scientificName": "Solanum lycopersicum",
            "commonNames": ["tomato", "love apple"],
            "leafDescription": "Serrated leaflets",
            "additionalInfo": "Prefers full sun",
        },
        "disease": "Early Blight",
        "confidence": 0.87,
    }]
    (finding,) = normalize_response(body)
    assert finding.plant_name == "Tomato"
    assert finding.scientific_name == "Solanum lycopersicum"
    assert finding.common_names == ("tomato", "love apple")
    assert finding.leaf_description == "Serrated leaflets"
    assert finding.additional_info == "Prefers full sun"
    assert finding.disease == "Early Blight"
    assert finding.confidence == 0.87


def test_single_nested_object():
    (finding,) = normalize_response({"plant": {"name": "Fern"}})
    assert finding == PlantFinding(plant_name="Fern")


def test_empty_list_means_no_findings():
    assert normalize_response([]) == ()


def test_error_field_never_yields_findings():
    with pytest.raises(ServiceReportedFailure) as exc:
        normalize_response({"error": "unrecognized image", "plant": {"name": "Fern"}})
    assert exc.value.user_message == "unrecognized image"


def test_string_confidence_is_parsed():
    (finding,) = normalize_response([{"plantName": "Rose", "confidence": "0.5"}])
    assert finding.confidence == 0.5
    assert finding.disease is None


@pytest.mark.parametrize("body", [
    {"status": "ok"},
    "Tomato",
    None,
    ["Tomato"],
    [{"disease": "Blight"}],
    [{"plant": {"scientificName": "Solanum"}}],
])
def test_unknown_shapes_are_service_failures(body):
    with pytest.raises(ServiceReportedFailure) as exc:
        normalize_response(body)
    assert exc.value.user_message == UNEXPECTED_RESPONSE
