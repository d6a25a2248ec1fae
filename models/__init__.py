from models.application import LoanApplication
from models.catalog import Category, LoanProduct
from models.document import ApplicationDocument
from models.eligibility import EligibilitySubmission
from models.form_field import FormField
from models.settings import SettingsDocument

__all__ = [
    "ApplicationDocument",
    "Category",
    "EligibilitySubmission",
    "FormField",
    "LoanApplication",
    "LoanProduct",
    "SettingsDocument",
]
