from __future__ import annotations

from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

PAN_PATTERN = r"^[A-Za-z0-9]{10}$"
AADHAR_PATTERN = r"^[0-9]{12}$"
PINCODE_PATTERN = r"^[0-9]{6}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

ValueKind = Literal["scalar", "files", "object"]


class PersonalInfoSchema(BaseModel):
    full_name: str = Field(..., alias="fullName", min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    date_of_birth: date = Field(..., alias="dateOfBirth")
    gender: Optional[str] = None
    pan: str = Field(..., pattern=PAN_PATTERN)
    aadhar: str = Field(..., pattern=AADHAR_PATTERN)
    marital_status: Optional[str] = Field(None, alias="maritalStatus")
    number_of_dependents: int = Field(0, alias="numberOfDependents", ge=0)

    model_config = {"populate_by_name": True}


class AddressLineSchema(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    country: str = "India"


class AddressSchema(BaseModel):
    current: AddressLineSchema
    permanent: AddressLineSchema


class EmploymentInfoSchema(BaseModel):
    employment_type: str = Field(..., alias="employmentType", min_length=1)
    company_name: Optional[str] = Field(None, alias="companyName")
    designation: Optional[str] = None
    work_experience: Optional[str] = Field(None, alias="workExperience")
    monthly_income: float = Field(..., alias="monthlyIncome", gt=0)
    business_type: Optional[str] = Field(None, alias="businessType")
    business_age: Optional[str] = Field(None, alias="businessAge")

    model_config = {"populate_by_name": True}


class LoanDetailsSchema(BaseModel):
    amount: float = Field(..., gt=0)
    tenure: int = Field(..., gt=0, description="Months")
    purpose: Optional[str] = None


class DocumentAttachmentIn(BaseModel):
    type: str = Field(..., min_length=1, description="Free-text category, e.g. 'Selfie', 'PAN Card'")
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class ApplicationCreate(BaseModel):
    loan_id: str = Field(..., alias="loanId", min_length=1)
    user_id: Optional[str] = Field(None, alias="userId")
    personal_info: PersonalInfoSchema = Field(..., alias="personalInfo")
    address: AddressSchema
    employment_info: EmploymentInfoSchema = Field(..., alias="employmentInfo")
    loan_details: LoanDetailsSchema = Field(..., alias="loanDetails")
    documents: list[DocumentAttachmentIn] = Field(default_factory=list)
    dynamic_fields: dict[str, Any] = Field(default_factory=dict, alias="dynamicFields")

    model_config = {"populate_by_name": True}


class TaggedValue(BaseModel):
    """Stored form of a dynamic value; `kind` is fixed by the assembler at write time."""
    kind: ValueKind
    value: Any


class ApplicationReject(BaseModel):
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

    model_config = {"populate_by_name": True}


class ApplicationStatusUpdate(BaseModel):
    status: Literal["Documents Pending", "Under Review"]


class DocumentReject(BaseModel):
    remarks: Optional[str] = None
