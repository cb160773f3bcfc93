import pytest

import app as backend
from llm_wrapper import SchemaMismatch, TransportFailure
from pydantic_models import SymptomResponse


@pytest.fixture
def client():
    backend.app.config["TESTING"] = True
    return backend.app.test_client()


def _stub_suggest(monkeypatch, result=None, error=None):
    seen = []

    async def fake(symptoms, client=None):
        seen.append(symptoms)
        if error is not None:
            raise error
        return result

    monkeypatch.setattr(backend, "suggest_possible_conditions", fake)
    return seen


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"/api/symptom-check" in resp.data


def test_symptom_check_success(client, monkeypatch):
    seen = _stub_suggest(monkeypatch, result=SymptomResponse(possible_conditions=["Common cold", "Influenza"]))
    resp = client.post("/api/symptom-check", json={"symptoms": "runny nose and mild fever"})
    assert resp.status_code == 200
    assert resp.get_json() == {"possible_conditions": ["Common cold", "Influenza"]}
    assert seen == ["runny nose and mild fever"]


def test_symptom_check_empty_result_is_success(client, monkeypatch):
    _stub_suggest(monkeypatch, result=SymptomResponse(possible_conditions=[]))
    resp = client.post("/api/symptom-check", json={"symptoms": "nothing specific really"})
    assert resp.status_code == 200
    assert resp.get_json() == {"possible_conditions": []}


@pytest.mark.parametrize("payload", [None, {}, {"text": "headache for two days"}, ["headache"]])
def test_symptom_check_requires_symptoms_field(client, payload):
    resp = client.post("/api/symptom-check", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "invalid_request"


@pytest.mark.parametrize("symptoms", ["too short", "x" * 1001, "          ", 42])
def test_symptom_check_applies_form_policy(client, monkeypatch, symptoms):
    seen = _stub_suggest(monkeypatch, result=SymptomResponse(possible_conditions=[]))
    resp = client.post("/api/symptom-check", json={"symptoms": symptoms})
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "invalid_request"
    assert seen == []


def test_schema_mismatch_maps_to_502(client, monkeypatch):
    _stub_suggest(monkeypatch, error=SchemaMismatch("Expected a JSON array, got dict", raw="{}"))
    resp = client.post("/api/symptom-check", json={"symptoms": "stomach cramps after lunch"})
    assert resp.status_code == 502
    body = resp.get_json()
    assert body["kind"] == "schema_mismatch"
    assert "JSON array" in body["error"]


def test_transport_failure_maps_to_503(client, monkeypatch):
    _stub_suggest(monkeypatch, error=TransportFailure("Generation service call failed: timeout"))
    resp = client.post("/api/symptom-check", json={"symptoms": "stomach cramps after lunch"})
    assert resp.status_code == 503
    assert resp.get_json()["kind"] == "transport_failure"


def test_symptom_check_end_to_end_offline(client, offline):
    resp = client.post("/api/symptom-check", json={"symptoms": "Bad headache and feeling tired"})
    assert resp.status_code == 200
    assert resp.get_json()["possible_conditions"] == ["Migraine", "Tension headache", "Anemia", "Sleep deprivation"]


def test_beds_filter_by_name_and_location(client):
    names = [h["hospital_name"] for h in client.get("/api/beds?q=HOSPITAL").get_json()]
    assert names == ["City General Hospital", "Hope County Hospital"]

    names = [h["hospital_name"] for h in client.get("/api/beds?q=hospital&location=Suburbia").get_json()]
    assert names == ["Hope County Hospital"]

    assert len(client.get("/api/beds?location=all").get_json()) == 5


def test_bed_locations(client):
    assert client.get("/api/beds/locations").get_json() == ["Metropolis", "Suburbia"]


def test_medicines_lookup(client):
    rows = client.get("/api/medicines?q=ibu").get_json()
    assert len(rows) == 4
    assert {r["medicine"]["name"] for r in rows} == {"Ibuprofen 200mg"}
    assert client.get("/api/medicines?q=aspirin").get_json() == []


def test_inventory_matches_generic_name_sorted(client):
    names = [m["name"] for m in client.get("/api/inventory?q=acetaminophen").get_json()]
    assert names == ["Paracetamol 500mg"]
    all_names = [m["name"] for m in client.get("/api/inventory").get_json()]
    assert all_names == sorted(all_names)


def test_login_returns_user_dashboard_and_navigation(client):
    body = client.post("/api/login", json={"role": "pharmacy"}).get_json()
    assert body["user"]["name"] == "Pat Pharmacy"
    assert body["dashboard"] == "/pharmacy/dashboard"
    assert "/medicine-checker" in [item["href"] for item in body["navigation"]]
    assert "/bed-availability" not in [item["href"] for item in body["navigation"]]


@pytest.mark.parametrize("payload", [{"role": "doctor"}, {}, {"role": ["admin"]}])
def test_login_rejects_unknown_role(client, payload):
    assert client.post("/api/login", json=payload).status_code == 400


def test_navigation_without_role_is_public(client):
    items = client.get("/api/navigation").get_json()
    assert [item["href"] for item in items] == ["/"]


def test_beds_unfiltered_are_sorted(client):
    names = [h["hospital_name"] for h in client.get("/api/beds").get_json()]
    assert len(names) == 5
    assert names == sorted(names)


ADMIN = {"X-Role": "admin"}
PHARMACY = {"X-Role": "pharmacy"}


@pytest.mark.parametrize("requested, expected", [(-1, 0), (80, 80), (81, 80)])
def test_admin_updates_bed_count_with_clamping(client, requested, expected):
    resp = client.patch("/api/beds/3", json={"available_beds": requested}, headers=ADMIN)
    assert resp.status_code == 200
    assert resp.get_json()["available_beds"] == expected


@pytest.mark.parametrize("headers", [{}, {"X-Role": "patient"}, PHARMACY])
def test_bed_edits_require_admin(client, headers):
    assert client.patch("/api/beds/3", json={"available_beds": 1}, headers=headers).status_code == 403
    assert client.post("/api/beds", json={"hospital_name": "X", "total_beds": 1}, headers=headers).status_code == 403


def test_bed_update_validation_and_missing_hospital(client):
    assert client.patch("/api/beds/3", json={"available_beds": "lots"}, headers=ADMIN).status_code == 400
    assert client.patch("/api/beds/99", json={"available_beds": 1}, headers=ADMIN).status_code == 404


def test_admin_adds_hospital(client):
    resp = client.post("/api/beds", json={"hospital_name": "Lakeside Hospital", "total_beds": 40,
                                          "location": "Suburbia"}, headers=ADMIN)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["available_beds"] == 40
    names = [h["hospital_name"] for h in client.get("/api/beds?location=Suburbia").get_json()]
    assert names == ["Hope County Hospital", "Lakeside Hospital", "Riverdale Community Clinic"]


@pytest.mark.parametrize("payload", [{"hospital_name": "", "total_beds": 5},
                                     {"hospital_name": "Y", "total_beds": -1},
                                     {"total_beds": 5}])
def test_add_hospital_rejects_bad_payload(client, payload):
    assert client.post("/api/beds", json=payload, headers=ADMIN).status_code == 400


def test_pharmacy_updates_stock(client):
    resp = client.patch("/api/inventory/med2", json={"availability": "Out of Stock"}, headers=PHARMACY)
    assert resp.status_code == 200
    assert client.get("/api/inventory?q=amoxicillin").get_json()[0]["availability"] == "Out of Stock"
    bad = client.patch("/api/inventory/med2", json={"availability": "Plenty"}, headers=PHARMACY)
    assert bad.status_code == 400
    assert client.patch("/api/inventory/nope", json={"availability": "In Stock"}, headers=PHARMACY).status_code == 404


def test_pharmacy_adds_medicine(client):
    resp = client.post("/api/inventory", json={"name": "Omeprazole 20mg", "generic_name": "Omeprazole"},
                       headers=PHARMACY)
    assert resp.status_code == 201
    assert resp.get_json()["availability"] == "In Stock"
    assert [m["name"] for m in client.get("/api/inventory?q=omeprazole").get_json()] == ["Omeprazole 20mg"]


@pytest.mark.parametrize("headers", [{}, ADMIN])
def test_inventory_edits_require_pharmacy(client, headers):
    assert client.post("/api/inventory", json={"name": "X"}, headers=headers).status_code == 403
    assert client.patch("/api/inventory/med1", json={"availability": "In Stock"}, headers=headers).status_code == 403


def test_dashboard_per_role(client):
    admin = client.get("/api/dashboard", headers=ADMIN).get_json()
    assert admin["stats"]["hospitals"] == 5
    assert admin["features"][0]["title"] == "Manage Bed Availability"
    patient = client.get("/api/dashboard", headers={"X-Role": "patient"}).get_json()
    assert patient["stats"] == {}
    assert client.get("/api/dashboard").status_code == 403
