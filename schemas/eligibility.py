from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

EmploymentType = Literal["SALARIED", "SELF_EMPLOYED", "BUSINESS"]


class EligibilityCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    loan_id: Optional[str] = Field(None, alias="loanId")
    employment_type: EmploymentType = Field("SALARIED", alias="employmentType")
    net_monthly_income: float = Field(..., alias="netMonthlyIncome", ge=0)
    pancard: Optional[str] = Field(None, pattern=r"^[A-Za-z0-9]{10}$")
    dob: Optional[date] = None
    gender: Optional[str] = None
    personal_email: Optional[str] = Field(None, alias="personalEmail")
    company_name: Optional[str] = Field(None, alias="companyName")
    next_salary_date: Optional[date] = Field(None, alias="nextSalaryDate")
    pin_code: str = Field(..., alias="pinCode", pattern=r"^\d{6}$")
    state: Optional[str] = None
    city: Optional[str] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _salaried_details(self) -> "EligibilityCreate":
        if self.employment_type == "SALARIED":
            if not (self.company_name or "").strip():
                raise ValueError("Company Name is required for salaried employees")
            if self.next_salary_date is None:
                raise ValueError("Next Salary Date is required for salaried employees")
        return self


class EligibilityReject(BaseModel):
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")

    model_config = {"populate_by_name": True}
