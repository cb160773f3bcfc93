# app.py — Flask backend
import logging
from functools import wraps

from flask import Flask, request, jsonify
from pydantic import ValidationError

import mock_data
from llm_wrapper import SymptomCheckError, suggest_possible_conditions
from pydantic_models import BedCountUpdate, NewHospital, NewMedicine, StockUpdate, SymptomForm

logger = logging.getLogger(__name__)

app = Flask(__name__)

ERROR_STATUS = {
    "invalid_request": 400,
    "schema_mismatch": 502,
    "transport_failure": 503,
}


def _dump(models):
    return [m.model_dump() for m in models]


def _invalid(e: ValidationError):
    return jsonify({"error": e.errors()[0]["msg"], "kind": "invalid_request"}), 400


def requires_role(*roles):
    """Mock role gate on the X-Role header; the header is trusted, this is not authentication."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if request.headers.get("X-Role") not in roles:
                return jsonify({"error": f"Requires role: {', '.join(roles)}"}), 403
            return view(*args, **kwargs)
        return wrapped
    return decorator


@app.errorhandler(SymptomCheckError)
def symptom_check_error(e):
    status = ERROR_STATUS.get(e.kind, 500)
    logger.warning("symptom check failed (%s): %s", e.kind, e)
    return jsonify({"error": str(e), "kind": e.kind}), status


@app.route("/", methods=["GET"])
def index():
    return "Healthcare Assist — POST /api/symptom-check with {'symptoms':'...'}"


@app.route("/api/symptom-check", methods=["POST"])
async def symptom_check():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict) or "symptoms" not in data:
        return jsonify({"error": "Please POST JSON with 'symptoms' field.", "kind": "invalid_request"}), 400

    try:
        form = SymptomForm(symptoms=data["symptoms"])
    except ValidationError as e:
        return _invalid(e)

    result = await suggest_possible_conditions(form.symptoms)
    return jsonify(result.model_dump())


@app.route("/api/beds", methods=["GET"])
def beds():
    term = request.args.get("q", "")
    location = request.args.get("location")
    return jsonify(_dump(mock_data.search_beds(term, location)))


@app.route("/api/beds", methods=["POST"])
@requires_role("admin")
def add_hospital():
    try:
        new = NewHospital.model_validate(request.get_json(force=True, silent=True) or {})
    except ValidationError as e:
        return _invalid(e)
    hospital = mock_data.add_hospital(new.hospital_name, new.total_beds, new.location, new.contact)
    return jsonify(hospital.model_dump()), 201


@app.route("/api/beds/<hospital_id>", methods=["PATCH"])
@requires_role("admin")
def update_beds(hospital_id):
    try:
        update = BedCountUpdate.model_validate(request.get_json(force=True, silent=True) or {})
    except ValidationError as e:
        return _invalid(e)
    try:
        hospital = mock_data.update_bed_count(hospital_id, update.available_beds)
    except KeyError:
        return jsonify({"error": f"No hospital with id {hospital_id!r}"}), 404
    return jsonify(hospital.model_dump())


@app.route("/api/beds/locations", methods=["GET"])
def bed_locations():
    return jsonify(mock_data.bed_locations())


@app.route("/api/medicines", methods=["GET"])
def medicines():
    return jsonify(_dump(mock_data.medicine_availability(request.args.get("q", ""))))


@app.route("/api/inventory", methods=["GET"])
def inventory():
    return jsonify(_dump(mock_data.search_inventory(request.args.get("q", ""))))


@app.route("/api/inventory", methods=["POST"])
@requires_role("pharmacy")
def add_medicine():
    try:
        new = NewMedicine.model_validate(request.get_json(force=True, silent=True) or {})
    except ValidationError as e:
        return _invalid(e)
    item = mock_data.add_medicine(new.name, new.generic_name, new.availability)
    return jsonify(item.model_dump()), 201


@app.route("/api/inventory/<medicine_id>", methods=["PATCH"])
@requires_role("pharmacy")
def update_stock(medicine_id):
    try:
        update = StockUpdate.model_validate(request.get_json(force=True, silent=True) or {})
    except ValidationError as e:
        return _invalid(e)
    try:
        item = mock_data.set_availability(medicine_id, update.availability)
    except KeyError:
        return jsonify({"error": f"No medicine with id {medicine_id!r}"}), 404
    return jsonify(item.model_dump())


@app.route("/api/dashboard", methods=["GET"])
@requires_role("patient", "admin", "pharmacy")
def dashboard():
    return jsonify(mock_data.dashboard(request.headers["X-Role"]))


@app.route("/api/login", methods=["POST"])
def login():
    data = request.get_json(force=True, silent=True) or {}
    role = data.get("role") if isinstance(data, dict) else None
    try:
        user = mock_data.login(role)
    except KeyError:
        return jsonify({"error": f"Unknown role: {role!r}"}), 400
    return jsonify({
        "user": user.model_dump(),
        "dashboard": mock_data.dashboard_path(user.role),
        "navigation": _dump(mock_data.nav_items_for_role(user.role)),
    })


@app.route("/api/navigation", methods=["GET"])
def navigation():
    return jsonify(_dump(mock_data.nav_items_for_role(request.args.get("role"))))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host="0.0.0.0", port=5000)
