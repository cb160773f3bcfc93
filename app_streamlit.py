import os

import streamlit as st
import requests

API_BASE = os.environ.get("SYMPTOM_API_URL", "http://127.0.0.1:5000")
REQUEST_TIMEOUT = 30

ERROR_MESSAGES = {
    "invalid_request": "Please describe your symptoms in 10 to 1000 characters.",
    "schema_mismatch": "The AI returned an answer we could not read. Please try again.",
    "transport_failure": "The AI service is unavailable right now. Please try again later.",
}

ROLE_LABELS = {"patient": "Patient", "admin": "Hospital Admin", "pharmacy": "Pharmacy Staff"}
STOCK_STATUSES = ["In Stock", "Low Stock", "Out of Stock"]

st.set_page_config(page_title="Healthcare Assist", page_icon="🏥", layout="centered")


def _role_header():
    session = st.session_state.get("session")
    return {"X-Role": session["user"]["role"]} if session else {}


def api_get(path, **params):
    resp = requests.get(f"{API_BASE}{path}", params=params, headers=_role_header(), timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def api_post(path, payload):
    return requests.post(f"{API_BASE}{path}", json=payload, headers=_role_header(), timeout=REQUEST_TIMEOUT)


def api_patch(path, payload):
    return requests.patch(f"{API_BASE}{path}", json=payload, headers=_role_header(), timeout=REQUEST_TIMEOUT)


def _report(resp, success):
    if resp.ok:
        st.success(success)
    else:
        st.error(resp.json().get("error", "Update failed."))


def login_view():
    st.title("🏥 Healthcare Assist")
    st.info("Demo login: pick a role. There is no real authentication here.")
    role = st.radio("Sign in as", list(ROLE_LABELS), format_func=ROLE_LABELS.get)
    if not st.button("Login"):
        return
    try:
        resp = api_post("/api/login", {"role": role})
    except requests.RequestException:
        st.error("Failed to reach the backend. Please try again.")
        return
    if resp.ok:
        st.session_state["session"] = resp.json()
        st.rerun()
    else:
        st.error(resp.json().get("error", "Login failed."))


def dashboard_view():
    user = st.session_state["session"]["user"]
    st.header(f"Welcome, {user['name']}")
    data = api_get("/api/dashboard")
    if data["stats"]:
        cols = st.columns(len(data["stats"]))
        for col, (label, value) in zip(cols, data["stats"].items()):
            col.metric(label.replace("_", " ").capitalize(), value)
    for feature in data["features"]:
        st.markdown(f"**{feature['title']}**  \n{feature['description']}")


def symptom_checker_view():
    st.header("💡 AI Symptom Checker")
    st.caption("This tool is for informational purposes only and does not constitute medical advice.")
    symptoms = st.text_area("Symptoms Description",
                            placeholder="e.g., I have a persistent cough, fever, and headache for the last 3 days...",
                            max_chars=1000)
    if not st.button("Get AI Suggestions"):
        return
    if len(symptoms) < 10:
        st.warning("Please describe your symptoms in at least 10 characters.")
        return

    with st.spinner("Getting suggestions..."):
        try:
            resp = api_post("/api/symptom-check", {"symptoms": symptoms})
        except requests.RequestException:
            st.error("Failed to reach the backend. Please try again.")
            return

    data = resp.json()
    if not resp.ok:
        st.error(ERROR_MESSAGES.get(data.get("kind"), "Failed to get suggestions. Please try again."))
        return

    conditions = data["possible_conditions"]
    if not conditions:
        st.subheader("No Specific Conditions Identified")
        st.write("The AI could not identify specific conditions from the symptoms provided. "
                 "Please try to be more specific or consult a healthcare professional.")
        return
    st.subheader("✨ Possible Conditions")
    for cond in conditions:
        st.write("•", cond)
    st.caption("Remember to consult a healthcare professional for an accurate diagnosis.")


def bed_availability_view():
    st.header("🛏️ Bed Availability")
    is_admin = st.session_state["session"]["user"]["role"] == "admin"
    col1, col2 = st.columns(2)
    term = col1.text_input("Search hospital")
    location = col2.selectbox("Location", ["all"] + api_get("/api/beds/locations"))
    hospitals = api_get("/api/beds", q=term, location=location)
    if not hospitals:
        st.info("No hospitals match your search.")
    else:
        st.dataframe(hospitals, use_container_width=True)

    if not is_admin:
        return
    st.subheader("Update bed counts")
    for h in hospitals:
        c1, c2 = st.columns([3, 1])
        count = c1.number_input(f"{h['hospital_name']} (of {h['total_beds']})", value=h["available_beds"],
                                step=1, key=f"beds-{h['id']}")
        if c2.button("Save", key=f"save-{h['id']}"):
            _report(api_patch(f"/api/beds/{h['id']}", {"available_beds": int(count)}), "Bed count updated.")

    with st.form("add_hospital", clear_on_submit=True):
        st.subheader("Add hospital")
        name = st.text_input("Hospital name")
        total = st.number_input("Total beds", min_value=0, step=1)
        new_location = st.text_input("Location")
        contact = st.text_input("Contact")
        if st.form_submit_button("Add"):
            _report(api_post("/api/beds", {"hospital_name": name, "total_beds": int(total),
                                           "location": new_location, "contact": contact}), "Hospital added.")


def medicine_checker_view():
    st.header("💊 Medicine Checker")
    term = st.text_input("Medicine name", placeholder="e.g., Paracetamol")
    if not term:
        return
    rows = api_get("/api/medicines", q=term)
    if not rows:
        st.info(f'No results found for "{term}" in our mock database.')
        return
    for row in rows:
        st.markdown(f"**{row['pharmacy_name']}** ({row['distance']})  \n"
                    f"{row['pharmacy_address']}  \nAvailability: {row['availability']}")


def inventory_view():
    st.header("📦 Pharmacy Inventory")
    term = st.text_input("Filter by name or generic name")
    items = api_get("/api/inventory", q=term)
    if not items:
        st.info("No medicines match your filter.")
    for item in items:
        c1, c2, c3 = st.columns([3, 2, 1])
        c1.markdown(f"**{item['name']}**  \n{item.get('generic_name') or ''}")
        status = c2.selectbox("Availability", STOCK_STATUSES, index=STOCK_STATUSES.index(item["availability"]),
                              key=f"stock-{item['id']}", label_visibility="collapsed")
        if c3.button("Save", key=f"save-{item['id']}"):
            _report(api_patch(f"/api/inventory/{item['id']}", {"availability": status}), "Stock updated.")

    with st.form("add_medicine", clear_on_submit=True):
        st.subheader("Add medicine")
        name = st.text_input("Medicine name")
        generic = st.text_input("Generic name")
        availability = st.selectbox("Availability", STOCK_STATUSES)
        if st.form_submit_button("Add"):
            _report(api_post("/api/inventory", {"name": name, "generic_name": generic,
                                                "availability": availability}), "Medicine added.")


PAGES = {
    "Dashboard": (dashboard_view, {"patient", "admin", "pharmacy"}),
    "Symptom Checker": (symptom_checker_view, {"patient"}),
    "Bed Availability": (bed_availability_view, {"patient", "admin"}),
    "Medicine Checker": (medicine_checker_view, {"patient", "pharmacy"}),
    "Inventory": (inventory_view, {"pharmacy"}),
}


session = st.session_state.get("session")
if not session:
    login_view()
else:
    user = session["user"]
    st.sidebar.header(f"👤 {user['name']}")
    st.sidebar.caption(ROLE_LABELS[user["role"]])
    allowed = [name for name, (_, roles) in PAGES.items() if user["role"] in roles]
    page = st.sidebar.radio("Go to", allowed)
    if st.sidebar.button("Logout"):
        del st.session_state["session"]
        st.rerun()
    try:
        PAGES[page][0]()
    except requests.RequestException as e:
        st.error(f"Backend request failed: {e}")
