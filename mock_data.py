"""
In-memory demo data: hospitals, medicines, pharmacies, mock users and role navigation.
Lookups are plain case-insensitive substring filters; admin and pharmacy edits
change the lists in place and last only as long as the process.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic_models import (
    BedAvailability,
    InventoryMedicine,
    Medicine,
    NavigationItem,
    PharmacyMedicineAvailability,
    User,
)


def _hours_ago(hours: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()


BEDS = [
    BedAvailability(id="1", hospital_name="City General Hospital", total_beds=200, available_beds=45,
                    last_updated=_hours_ago(2), location="Metropolis", contact="555-0101"),
    BedAvailability(id="2", hospital_name="St. Luke's Medical Center", total_beds=150, available_beds=12,
                    last_updated=_hours_ago(1), location="Metropolis", contact="555-0102"),
    BedAvailability(id="3", hospital_name="Hope County Hospital", total_beds=80, available_beds=5,
                    last_updated=_hours_ago(5), location="Suburbia", contact="555-0201"),
    BedAvailability(id="4", hospital_name="Riverdale Community Clinic", total_beds=50, available_beds=25,
                    last_updated=_hours_ago(0.5), location="Suburbia", contact="555-0202"),
    BedAvailability(id="5", hospital_name="Downtown Emergency Care", total_beds=120, available_beds=0,
                    last_updated=_hours_ago(3), location="Metropolis", contact="555-0103"),
]

MEDICINES = [
    Medicine(id="med1", name="Paracetamol 500mg", generic_name="Acetaminophen"),
    Medicine(id="med2", name="Amoxicillin 250mg", generic_name="Amoxicillin"),
    Medicine(id="med3", name="Ibuprofen 200mg", generic_name="Ibuprofen"),
    Medicine(id="med4", name="Cetirizine 10mg", generic_name="Cetirizine"),
    Medicine(id="med5", name="Lisinopril 10mg", generic_name="Lisinopril"),
]

PHARMACIES = [
    {"pharmacy_name": "HealthFirst Pharmacy", "pharmacy_address": "123 Main St, Metropolis",
     "availability": "In Stock", "hours": 1, "distance": "1.2 km"},
    {"pharmacy_name": "Wellness Drugstore", "pharmacy_address": "456 Oak Ave, Metropolis",
     "availability": "Low Stock", "hours": 3, "distance": "2.5 km"},
    {"pharmacy_name": "Community Meds", "pharmacy_address": "789 Pine Ln, Suburbia",
     "availability": "Out of Stock", "hours": 0.5, "distance": "5.1 km"},
    {"pharmacy_name": "QuickCare Pharma", "pharmacy_address": "101 Elm Rd, Metropolis",
     "availability": "In Stock", "hours": 2, "distance": "0.8 km"},
]

INVENTORY = [
    InventoryMedicine(**MEDICINES[0].model_dump(), availability="In Stock"),
    InventoryMedicine(**MEDICINES[1].model_dump(), availability="Low Stock"),
    InventoryMedicine(**MEDICINES[2].model_dump(), availability="In Stock"),
    InventoryMedicine(**MEDICINES[3].model_dump(), availability="Out of Stock"),
    InventoryMedicine(**MEDICINES[4].model_dump(), availability="Low Stock"),
]

MOCK_USERS = {
    "patient": User(id="patient1", name="John Patient", role="patient", email="patient@example.com"),
    "admin": User(id="admin1", name="Jane Admin", role="admin", email="admin@example.com"),
    "pharmacy": User(id="pharmacy1", name="Pat Pharmacy", role="pharmacy", email="pharmacy@example.com"),
}

NAV_ITEMS = [
    NavigationItem(href="/dashboard", label="Dashboard", roles=["patient", "admin", "pharmacy"]),
    NavigationItem(href="/symptom-checker", label="Symptom Checker", roles=["patient"]),
    NavigationItem(href="/bed-availability", label="Bed Availability", roles=["patient", "admin"]),
    NavigationItem(href="/medicine-checker", label="Medicine Checker", roles=["patient", "pharmacy"]),
    NavigationItem(href="/admin/dashboard", label="Admin Dashboard", roles=["admin"]),
    NavigationItem(href="/pharmacy/dashboard", label="Pharmacy Dashboard", roles=["pharmacy"]),
    NavigationItem(href="/pharmacy/inventory", label="Inventory", roles=["pharmacy"]),
]

PUBLIC_NAV_ITEMS = [
    NavigationItem(href="/", label="Home", public=True),
    NavigationItem(href="/login", label="Login", public=True),
]

DASHBOARD_PATHS = {
    "admin": "/admin/dashboard",
    "pharmacy": "/pharmacy/dashboard",
    "patient": "/dashboard",
}

DASHBOARD_FEATURES = {
    "patient": [
        {"title": "Symptom Checker", "description": "Get AI suggestions for possible conditions.", "link": "/symptom-checker"},
        {"title": "Bed Availability", "description": "Find hospitals with free beds.", "link": "/bed-availability"},
        {"title": "Medicine Checker", "description": "See which pharmacies stock a medicine.", "link": "/medicine-checker"},
    ],
    "admin": [
        {"title": "Manage Bed Availability", "description": "Update hospital bed counts.", "link": "/bed-availability"},
        {"title": "User Management", "description": "View and manage system users (Demo).", "link": "#"},
        {"title": "System Analytics", "description": "View usage statistics and reports (Demo).", "link": "#"},
    ],
    "pharmacy": [
        {"title": "Manage Medicine Inventory", "description": "Update stock levels and availability.", "link": "/pharmacy/inventory"},
        {"title": "View Prescription Orders", "description": "Process incoming prescriptions (Demo).", "link": "#"},
        {"title": "Supplier Management", "description": "Track orders from suppliers (Demo).", "link": "#"},
    ],
}


def _matches(value: Optional[str], term: str) -> bool:
    return bool(value) and term.lower() in value.lower()


def search_beds(term: str = "", location: Optional[str] = None) -> List[BedAvailability]:
    matches = [
        h for h in BEDS
        if (not term or _matches(h.hospital_name, term))
        and (not location or location == "all" or h.location == location)
    ]
    return sorted(matches, key=lambda h: h.hospital_name)


def bed_locations() -> List[str]:
    # first-seen order
    return list(dict.fromkeys(h.location for h in BEDS if h.location))


def _find(items, item_id: str):
    for i, item in enumerate(items):
        if item.id == item_id:
            return i, item
    raise KeyError(item_id)


def update_bed_count(hospital_id: str, available_beds: int) -> BedAvailability:
    """Set available beds, clamped to [0, total_beds], and refresh last_updated."""
    _, hospital = _find(BEDS, hospital_id)
    hospital.available_beds = max(0, min(available_beds, hospital.total_beds))
    hospital.last_updated = _hours_ago(0)
    return hospital


def add_hospital(hospital_name: str, total_beds: int, location: Optional[str] = None,
                 contact: Optional[str] = None) -> BedAvailability:
    # a new hospital starts with every bed free
    hospital = BedAvailability(
        id=str(len(BEDS) + 1),
        hospital_name=hospital_name,
        total_beds=total_beds,
        available_beds=total_beds,
        last_updated=_hours_ago(0),
        location=location or None,
        contact=contact or None,
    )
    BEDS.append(hospital)
    return hospital


def find_medicine(term: str) -> Optional[Medicine]:
    if not term:
        return None
    return next((m for m in MEDICINES if _matches(m.name, term)), None)


def medicine_availability(term: str) -> List[PharmacyMedicineAvailability]:
    """Pharmacy stock rows for the first medicine whose name contains `term`."""
    medicine = find_medicine(term)
    if medicine is None:
        return []
    return [
        PharmacyMedicineAvailability(
            id=f"pharm{i + 1}",
            pharmacy_name=p["pharmacy_name"],
            pharmacy_address=p["pharmacy_address"],
            medicine=medicine,
            availability=p["availability"],
            last_updated=_hours_ago(p["hours"]),
            distance=p["distance"],
        )
        for i, p in enumerate(PHARMACIES)
    ]


def search_inventory(term: str = "") -> List[InventoryMedicine]:
    items = [m for m in INVENTORY if not term or _matches(m.name, term) or _matches(m.generic_name, term)]
    return sorted(items, key=lambda m: m.name)


def set_availability(medicine_id: str, availability: str) -> InventoryMedicine:
    i, item = _find(INVENTORY, medicine_id)
    INVENTORY[i] = InventoryMedicine(**{**item.model_dump(), "availability": availability})
    return INVENTORY[i]


def add_medicine(name: str, generic_name: Optional[str] = None, availability: str = "In Stock") -> InventoryMedicine:
    item = InventoryMedicine(
        id=f"med-{len(INVENTORY) + 1}",
        name=name,
        generic_name=generic_name or None,
        availability=availability,
    )
    INVENTORY.append(item)
    return item


def nav_items_for_role(role: Optional[str]) -> List[NavigationItem]:
    if not role:
        return [item for item in PUBLIC_NAV_ITEMS if item.href != "/login"]
    return [item for item in NAV_ITEMS if role in item.roles]


def dashboard_path(role: Optional[str]) -> str:
    return DASHBOARD_PATHS.get(role, "/login")


def login(role: str) -> User:
    """Mock login: returns the canned user for the role. Not an authentication check."""
    if not isinstance(role, str) or role not in MOCK_USERS:
        raise KeyError(role)
    return MOCK_USERS[role]


def dashboard(role: str) -> dict:
    """Feature cards plus demo stats for a role's landing page."""
    if role not in DASHBOARD_FEATURES:
        raise KeyError(role)
    stats = {}
    if role == "admin":
        stats = {
            "hospitals": len(BEDS),
            "total_beds": sum(h.total_beds for h in BEDS),
            "available_beds": sum(h.available_beds for h in BEDS),
            "full_hospitals": sum(1 for h in BEDS if h.available_beds == 0),
        }
    elif role == "pharmacy":
        stats = {"medicines": len(INVENTORY)}
        for status in ("In Stock", "Low Stock", "Out of Stock"):
            stats[status] = sum(1 for m in INVENTORY if m.availability == status)
    return {"features": DASHBOARD_FEATURES[role], "stats": stats}
