from __future__ import annotations

import inspect
import json

import pytest

from healthvision.errors import GatewayError
from healthvision.locales import get_bundle

ANALYSIS_REPLY = json.dumps({
    "possibleConditions": ["Sinusitis", "Common cold"],
    "severity": "Low",
    "recommendations": ["Use saline spray"],
    "requiresImmediateCare": False,
    "whenToSeeDoctor": "If fever lasts over 3 days",
    "selfCareTips": ["Steam inhalation"],
})

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def _analyze(client, **body):
    return client.post("/api/analyze", json=body)


# ---- health / probes ----

def test_health_reports_missing_key(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["ai"]["status"] == "API Key missing"
    assert payload["supported_languages"] == ["en", "es", "fr", "ar", "hi"]


def test_voice_probe_is_localized(client):
    payload = client.get("/api/test-voice", params={"language": "fr"}).json()
    assert payload["success"] is True
    assert payload["testText"] == get_bundle("fr").voice_test
    assert payload["speechLocale"] == "fr-FR"
    assert payload["language"] == "fr"


# Sync routes would run in a worker thread next to the event loop.
@pytest.mark.parametrize(
    "route", ["health", "analyze", "voice", "analyze_image", "drugs", "health_info", "history", "test_voice"]
)
def test_routes_run_on_the_event_loop(backend_module, route):
    assert inspect.iscoroutinefunction(getattr(backend_module, route))


# ---- analyze ----

def test_short_symptoms_are_rejected_without_calling_the_model(client, install_gateway):
    gateway = install_gateway(ANALYSIS_REPLY)
    response = _analyze(client, symptoms="hi")
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "minimum 3 characters" in response.json()["error"]
    assert gateway.calls == []


def test_missing_symptoms_are_rejected(client):
    response = _analyze(client, language="en")
    assert response.status_code == 400


def test_malformed_body_is_a_client_error(client):
    response = client.post("/api/analyze", content=b"{not json", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_chest_pain_without_key_is_emergency(client):
    response = _analyze(client, symptoms="Severe chest pain radiating to my jaw", age=58)
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["model"] == "Fallback"
    assert payload["note"] == get_bundle("en").no_key_note
    assert payload["analysis"]["severity"] == "Emergency"
    assert payload["analysis"]["requiresImmediateCare"] is True
    assert payload["sessionId"]

    history = client.get(f"/api/history/{payload['sessionId']}").json()
    assert history["count"] == 1
    assert history["history"][0]["age"] == "58"


def test_fallback_is_localized(client):
    payload = _analyze(client, symptoms="dolor de chest pain severe", language="es").json()
    assert payload["analysis"]["severity"] == "Emergencia"
    assert payload["language"] == "es"


def test_unknown_language_falls_back_to_english_terms(client):
    payload = _analyze(client, symptoms="fever and cough", language="de").json()
    assert payload["analysis"]["severity"] == "Low"
    assert payload["language"] == "de"


def test_model_reply_is_normalized(client, install_gateway):
    gateway = install_gateway(ANALYSIS_REPLY)
    payload = _analyze(client, symptoms="blocked nose and facial pressure", duration="5 days").json()

    assert payload["model"] == "test-model"
    assert payload["analysis"]["possibleConditions"] == ["Sinusitis", "Common cold"]
    assert payload["analysis"]["severity"] == "Low"
    assert payload["analysis"]["note"] == get_bundle("en").note
    prompt = gateway.calls[0]["prompt"]
    assert 'SYMPTOMS: "blocked nose and facial pressure"' in prompt
    assert "DURATION: 5 days" in prompt
    assert "AGE:" not in prompt


def test_session_history_feeds_next_prompt(client, install_gateway):
    gateway = install_gateway(ANALYSIS_REPLY, ANALYSIS_REPLY)
    first = _analyze(client, symptoms="itchy eyes", sessionId="session-a").json()
    second = _analyze(client, symptoms="itchy eyes again", sessionId="session-a").json()

    assert first["sessionId"] == second["sessionId"] == "session-a"
    assert "PREVIOUS VISITS" not in gateway.calls[0]["prompt"]
    assert '"itchy eyes" (Low)' in gateway.calls[1]["prompt"]


def test_user_id_is_used_as_session(client):
    payload = _analyze(client, symptoms="sore throat", userId="user-7").json()
    assert payload["sessionId"] == "user-7"


def test_gateway_failure_degrades_to_fallback(client, install_gateway):
    install_gateway(GatewayError("connection refused"))
    response = _analyze(client, symptoms="fever and cough since monday")
    assert response.status_code == 200
    payload = response.json()
    assert payload["model"] == "Fallback"
    assert payload["note"] == get_bundle("en").gateway_error_note
    assert payload["analysis"]["possibleConditions"] == get_bundle("en").viral_conditions


def test_unexpected_failure_degrades_to_fallback(client, install_gateway):
    install_gateway(RuntimeError("boom"))
    response = _analyze(client, symptoms="mild rash on arm")
    assert response.status_code == 200
    assert response.json()["analysis"]["severity"] == "Medium"


def test_free_text_reply_is_still_structured(client, install_gateway):
    install_gateway("This could be a serious infection. You should see a doctor today.")
    analysis = _analyze(client, symptoms="swollen red finger").json()["analysis"]
    assert analysis["severity"] == "High"
    assert analysis["recommendations"] == ["You should see a doctor today."]
    assert analysis["whenToSeeDoctor"] == "You should see a doctor today."


def test_history_returns_last_ten_newest_first(client):
    for i in range(12):
        _analyze(client, symptoms=f"symptom number {i}", sessionId="busy")

    payload = client.get("/api/history/busy").json()
    assert payload["success"] is True
    assert payload["count"] == 12
    assert len(payload["history"]) == 10
    assert payload["history"][0]["symptoms"] == "symptom number 11"
    assert payload["history"][-1]["symptoms"] == "symptom number 2"


def test_history_of_unknown_session_is_empty(client):
    payload = client.get("/api/history/never-seen").json()
    assert payload == {"success": True, "count": 0, "history": []}


# ---- drugs ----

def test_empty_medicines_rejected(client):
    assert client.post("/api/drugs", json={"medicines": []}).status_code == 400
    assert client.post("/api/drugs", json={"medicines": ["  "]}).status_code == 400
    assert client.post("/api/drugs", json={"language": "en"}).status_code == 400
    assert client.post("/api/drugs", json={"medicines": "aspirin"}).status_code == 400


def test_drugs_without_key(client):
    payload = client.post("/api/drugs", json={"medicines": ["aspirin"], "language": "fr"}).json()
    assert payload["model"] == "Fallback"
    assert payload["analysis"]["summary"] == get_bundle("fr").drug_no_key
    assert payload["fallback"] is False


def test_drugs_with_model(client, install_gateway):
    gateway = install_gateway(json.dumps({
        "interactions": ["Bleeding risk"],
        "warnings": [],
        "recommendations": ["Avoid combination"],
        "summary": "Do not combine.",
    }))
    payload = client.post(
        "/api/drugs", json={"medicines": ["ibuprofen", "warfarin"], "allergies": "penicillin"}
    ).json()
    assert payload["analysis"]["interactions"] == ["Bleeding risk"]
    assert payload["model"] == "test-model"
    assert "ibuprofen, warfarin" in gateway.calls[0]["prompt"]
    assert "Allergies: penicillin" in gateway.calls[0]["prompt"]


def test_drugs_gateway_failure(client, install_gateway):
    install_gateway(GatewayError("503"))
    payload = client.post("/api/drugs", json={"medicines": ["aspirin"]}).json()
    assert payload["success"] is True
    assert payload["fallback"] is True
    assert payload["analysis"]["summary"] == get_bundle("en").drug_unavailable


# ---- health info ----

def test_health_info_validation(client):
    assert client.post("/api/health-info", json={"topic": "a"}).status_code == 400


def test_health_info_without_key(client):
    payload = client.post("/api/health-info", json={"topic": "hay fever"}).json()
    assert payload["info"]["summary"] == get_bundle("en").health_info_no_key


def test_health_info_with_model(client, install_gateway):
    install_gateway(json.dumps({"summary": "Hay fever is an allergy.", "keyPoints": ["Pollen"]}))
    payload = client.post("/api/health-info", json={"topic": "hay fever", "language": "es"}).json()
    assert payload["info"]["summary"] == "Hay fever is an allergy."
    assert payload["info"]["keyPoints"] == ["Pollen"]
    assert payload["language"] == "es"


# ---- voice ----

def test_voice_requires_text(client):
    assert client.post("/api/voice", json={"language": "en"}).status_code == 400


def test_voice_without_key_echoes_text(client):
    payload = client.post("/api/voice", json={"text": "Rest and drink fluids.", "language": "hi"}).json()
    assert payload["text"] == "Rest and drink fluids."
    assert payload["language"] == "hi-IN"
    assert payload["optimized"] is False


def test_voice_optimized_by_model(client, install_gateway):
    install_gateway('{"text": "Rest... and drink fluids."}')
    payload = client.post("/api/voice", json={"text": "Rest and drink fluids."}).json()
    assert payload["text"] == "Rest... and drink fluids."
    assert payload["language"] == "en-US"
    assert payload["optimized"] is True


def test_voice_failure_echoes_text(client, install_gateway):
    install_gateway(GatewayError("timeout"))
    payload = client.post("/api/voice", json={"text": "Rest and drink fluids.", "language": "es"}).json()
    assert payload["success"] is True
    assert payload["text"] == "Rest and drink fluids."
    assert payload["language"] == "es-ES"


# ---- image ----

def test_image_is_required(client):
    response = client.post("/api/analyze-image", data={"symptoms": "rash"})
    assert response.status_code == 400
    assert response.json()["error"] == "No image uploaded"


def test_non_image_upload_rejected(client):
    response = client.post("/api/analyze-image", files={"image": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400


def test_image_without_key(client):
    response = client.post(
        "/api/analyze-image",
        data={"symptoms": "red rash", "language": "es"},
        files={"image": ("rash.png", PNG_BYTES, "image/png")},
    )
    payload = response.json()
    assert response.status_code == 200
    assert payload["fallback"] is True
    assert payload["note"] == get_bundle("es").no_key_note
    assert payload["analysis"]["severity"] in get_bundle("es").severities


def test_image_with_vision_model(client, install_gateway):
    gateway = install_gateway(ANALYSIS_REPLY)
    payload = client.post(
        "/api/analyze-image",
        data={"symptoms": "red rash"},
        files={"image": ("rash.png", PNG_BYTES, "image/png")},
    ).json()
    assert payload["model"] == "test-vision"
    assert payload["fallback"] is False
    assert payload["analysis"]["possibleConditions"] == ["Sinusitis", "Common cold"]
    image = gateway.calls[0]["image"]
    assert image.data == PNG_BYTES
    assert image.mime_type == "image/png"


def test_image_vision_failure_uses_text_analysis(client, install_gateway):
    gateway = install_gateway(GatewayError("vision down"), ANALYSIS_REPLY)
    payload = client.post(
        "/api/analyze-image",
        data={"symptoms": "red itchy rash", "language": "fr"},
        files={"image": ("rash.jpg", PNG_BYTES, "image/jpeg")},
    ).json()
    assert payload["model"] == "test-model"
    assert payload["note"] == get_bundle("fr").vision_unavailable_note
    assert gateway.calls[1]["image"] is None


def test_image_total_failure_is_static(client, install_gateway):
    install_gateway(GatewayError("vision down"), GatewayError("text down"))
    payload = client.post(
        "/api/analyze-image",
        data={"symptoms": "red itchy rash"},
        files={"image": ("rash.jpg", PNG_BYTES, "image/jpeg")},
    ).json()
    assert payload["success"] is True
    assert payload["fallback"] is True
    assert payload["note"] == get_bundle("en").image_unavailable_note


def test_image_vision_failure_without_description_still_tries_text(client, install_gateway):
    gateway = install_gateway(GatewayError("vision down"), ANALYSIS_REPLY)
    payload = client.post(
        "/api/analyze-image",
        files={"image": ("rash.png", PNG_BYTES, "image/png")},
    ).json()
    assert len(gateway.calls) == 2
    assert "No description provided" in gateway.calls[1]["prompt"]
    assert payload["model"] == "test-model"
    assert payload["fallback"] is False
    assert payload["note"] == get_bundle("en").vision_unavailable_note
