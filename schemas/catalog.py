from typing import Optional

from pydantic import BaseModel, Field, model_validator


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")
    order: int = 0

    model_config = {"populate_by_name": True}


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    order: Optional[int] = None

    model_config = {"populate_by_name": True}


class InterestRateSchema(BaseModel):
    """Annual interest rate band in percent."""
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    default: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_band(self) -> "InterestRateSchema":
        if self.max < self.min:
            raise ValueError("Max interest rate must be greater than or equal to min interest rate")
        if not (self.min <= self.default <= self.max):
            raise ValueError("Default interest rate must be between min and max interest rate")
        return self


class LoanProductCreate(BaseModel):
    category_id: str = Field(..., alias="categoryId", min_length=1)
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    interest_rate: InterestRateSchema = Field(..., alias="interestRate")
    min_loan_amount: float = Field(..., alias="minLoanAmount", gt=0)
    max_loan_amount: float = Field(..., alias="maxLoanAmount", gt=0)
    min_tenure: int = Field(..., alias="minTenure", gt=0, description="Months")
    max_tenure: int = Field(..., alias="maxTenure", gt=0, description="Months")
    image: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")
    order: int = 0

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_ranges(self) -> "LoanProductCreate":
        if self.max_loan_amount < self.min_loan_amount:
            raise ValueError("Max loan amount must be greater than or equal to min loan amount")
        if self.max_tenure < self.min_tenure:
            raise ValueError("Max tenure must be greater than or equal to min tenure")
        return self


class LoanProductUpdate(BaseModel):
    category_id: Optional[str] = Field(None, alias="categoryId")
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    interest_rate: Optional[InterestRateSchema] = Field(None, alias="interestRate")
    min_loan_amount: Optional[float] = Field(None, alias="minLoanAmount", gt=0)
    max_loan_amount: Optional[float] = Field(None, alias="maxLoanAmount", gt=0)
    min_tenure: Optional[int] = Field(None, alias="minTenure", gt=0)
    max_tenure: Optional[int] = Field(None, alias="maxTenure", gt=0)
    image: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    order: Optional[int] = None

    model_config = {"populate_by_name": True}
