"""
Application assembler: turns a submitted draft into a persisted LoanApplication.

The draft mixes fixed structured blocks (personal info, address, employment, loan details)
with a free map of dynamic values keyed by field name. The dynamic map is checked against
the schema resolved for the chosen loan at submission time; only keys in that schema are
stored, each tagged with its kind so readers never need to guess the shape.
"""
from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import ApplicationDocument, FormField, LoanApplication, LoanProduct
from schemas.application import ApplicationCreate, TaggedValue
from services.catalog import get_loan, interest_rate_of
from services.errors import IncompleteSubmissionError, ValidationError
from services.field_registry import resolve_schema
from services.form_renderer import validate_values

logger = logging.getLogger(__name__)


def compute_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    """Reducing-balance EMI, rounded to 2 decimals. Zero rate is straight division."""
    if tenure_months <= 0:
        raise ValueError("tenure must be positive")
    r = annual_rate_percent / 12 / 100
    if r == 0:
        return round(principal / tenure_months, 2)
    growth = (1 + r) ** tenure_months
    return round(principal * r * growth / (growth - 1), 2)


def generate_application_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{settings.application_number_prefix}-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def tag_value(field: Any, value: Any) -> dict[str, Any]:
    if field.type == "File":
        files = value if isinstance(value, list) else [value]
        tagged = TaggedValue(kind="files", value=[f for f in files if f])
    elif isinstance(value, (Mapping, list)):
        tagged = TaggedValue(kind="object", value=value)
    else:
        tagged = TaggedValue(kind="scalar", value=value)
    return tagged.model_dump()


def check_loan_terms(loan: LoanProduct, amount: float, tenure: int) -> None:
    errors: dict[str, str] = {}
    if not (loan.min_loan_amount <= amount <= loan.max_loan_amount):
        errors["amount"] = f"Amount must be between {loan.min_loan_amount:g} and {loan.max_loan_amount:g}"
    if not (loan.min_tenure <= tenure <= loan.max_tenure):
        errors["tenure"] = f"Tenure must be between {loan.min_tenure} and {loan.max_tenure} months"
    if errors:
        raise ValidationError("Loan details are outside the product range", errors)


def collect_dynamic_fields(fields: Sequence[FormField], values: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """
    Validate `values` against `fields` and return the tagged map to store.
    Raises IncompleteSubmissionError for empty required fields, ValidationError for bad values.
    Keys not in the schema are dropped.
    """
    validity = validate_values(fields, values)
    if validity.missing:
        labels = {f.name: f.label for f in fields}
        raise IncompleteSubmissionError(validity.missing, labels)
    if validity.invalid:
        raise ValidationError("Some fields have invalid values", validity.invalid)

    stored: dict[str, dict[str, Any]] = {}
    for field in fields:
        if field.name in values and values[field.name] is not None:
            stored[field.name] = tag_value(field, values[field.name])
    return stored


async def assemble_application(
    session: AsyncSession,
    draft: ApplicationCreate,
    user_id: Optional[str] = None,
) -> LoanApplication:
    loan = await get_loan(session, draft.loan_id)
    if not loan.is_active:
        raise ValidationError("This loan product is not accepting applications", {"loanId": "Inactive"})

    details = draft.loan_details
    check_loan_terms(loan, details.amount, details.tenure)

    schema = await resolve_schema(session, loan)
    try:
        dynamic = collect_dynamic_fields(schema, draft.dynamic_fields)
    except (IncompleteSubmissionError, ValidationError) as e:
        logger.warning("submission refused loan=%s reason=%s", loan.id, e.message)
        raise
    dropped = sorted(set(draft.dynamic_fields) - set(dynamic))
    if dropped:
        logger.info("submission dropped unknown dynamic keys loan=%s keys=%s", loan.id, dropped)

    rate = interest_rate_of(loan)["default"]
    now = datetime.now(timezone.utc)
    app = LoanApplication(
        id=f"app-{uuid.uuid4().hex[:12]}",
        application_number=generate_application_number(now),
        user_id=user_id or draft.user_id,
        loan_id=loan.id,
        status="Submitted",
        personal_info=draft.personal_info.model_dump(mode="json", by_alias=False),
        address=draft.address.model_dump(mode="json", by_alias=False),
        employment_info=draft.employment_info.model_dump(mode="json", by_alias=False),
        loan_details={
            "amount": details.amount,
            "tenure": details.tenure,
            "interest_rate": rate,
            "emi": compute_emi(details.amount, rate, details.tenure),
            "purpose": details.purpose,
        },
        dynamic_fields=dynamic,
        created_at=now,
        updated_at=now,
    )
    app.documents = [
        ApplicationDocument(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            position=i,
            type=d.type,
            name=d.name,
            url=d.url,
            status="Pending",
            created_at=now,
            updated_at=now,
        )
        for i, d in enumerate(draft.documents)
    ]
    session.add(app)
    await session.flush()
    logger.info(
        "application submitted id=%s number=%s loan=%s documents=%d",
        app.id,
        app.application_number,
        loan.id,
        len(app.documents),
    )
    return app
