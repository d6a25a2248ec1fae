from schemas.application import (
    AddressSchema,
    ApplicationCreate,
    ApplicationReject,
    ApplicationStatusUpdate,
    DocumentAttachmentIn,
    DocumentReject,
    EmploymentInfoSchema,
    LoanDetailsSchema,
    PersonalInfoSchema,
    TaggedValue,
)
from schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    InterestRateSchema,
    LoanProductCreate,
    LoanProductUpdate,
)
from schemas.eligibility import EligibilityCreate, EligibilityReject
from schemas.form_field import (
    FormFieldCreate,
    FormFieldResponse,
    FormFieldUpdate,
    FormValidity,
    FormValuesIn,
    PendingFieldDraft,
    RenderedForm,
    RenderedSection,
    Widget,
)

__all__ = [
    "AddressSchema",
    "ApplicationCreate",
    "ApplicationReject",
    "ApplicationStatusUpdate",
    "CategoryCreate",
    "CategoryUpdate",
    "DocumentAttachmentIn",
    "DocumentReject",
    "EligibilityCreate",
    "EligibilityReject",
    "EmploymentInfoSchema",
    "FormFieldCreate",
    "FormFieldResponse",
    "FormFieldUpdate",
    "FormValidity",
    "FormValuesIn",
    "InterestRateSchema",
    "LoanDetailsSchema",
    "LoanProductCreate",
    "LoanProductUpdate",
    "PendingFieldDraft",
    "PersonalInfoSchema",
    "RenderedForm",
    "RenderedSection",
    "TaggedValue",
    "Widget",
]
