from pydantic import BaseModel, Field, StrictStr, field_validator
from typing import Annotated, List, Literal, Optional

Role = Literal["patient", "admin", "pharmacy"]
Availability = Literal["In Stock", "Low Stock", "Out of Stock", "Not Available"]
StockStatus = Literal["In Stock", "Low Stock", "Out of Stock"]

ConditionName = Annotated[StrictStr, Field(min_length=1)]


class SymptomRequest(BaseModel):
    symptoms: str = Field(..., description="A description of the symptoms the user is experiencing.")

    @field_validator("symptoms")
    def must_not_be_blank(cls, v: str) -> str:
        # checked, not stripped: the text goes into the prompt verbatim
        if not v.strip():
            raise ValueError("symptoms must not be empty")
        return v


class SymptomForm(SymptomRequest):
    """Form policy applied by the web backend and UI, not by the LLM call itself."""
    symptoms: str = Field(..., min_length=10, max_length=1000)


class SymptomResponse(BaseModel):
    possible_conditions: List[ConditionName]


class User(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Role


class BedAvailability(BaseModel):
    id: str
    hospital_name: str
    total_beds: int
    available_beds: int
    last_updated: str  # ISO timestamp
    location: Optional[str] = None
    contact: Optional[str] = None


class Medicine(BaseModel):
    id: str
    name: str
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None


class InventoryMedicine(Medicine):
    availability: StockStatus


class PharmacyMedicineAvailability(BaseModel):
    id: str
    pharmacy_name: str
    pharmacy_address: str
    medicine: Medicine
    availability: Availability
    last_updated: str
    distance: Optional[str] = None


class NavigationItem(BaseModel):
    href: str
    label: str
    roles: List[Role] = []
    public: bool = False


# Edit payloads for the admin and pharmacy views

class BedCountUpdate(BaseModel):
    available_beds: int


class NewHospital(BaseModel):
    hospital_name: str = Field(..., min_length=1)
    total_beds: int = Field(..., ge=0)
    location: Optional[str] = None
    contact: Optional[str] = None


class StockUpdate(BaseModel):
    availability: StockStatus


class NewMedicine(BaseModel):
    name: str = Field(..., min_length=1)
    generic_name: Optional[str] = None
    availability: StockStatus = "In Stock"
