"""
Field schema registry: admin-authored input fields scoped to a category or loan product.

Naming convention: a field's machine key is derived from its label by `derive_field_name`
(lowercase, runs of non-alphanumerics collapsed to '-', trimmed). An explicit name overrides
derivation verbatim. Keys are unique within (scope, section); a collision is a ValidationError,
never a silent rename or overwrite.

Ordering: fields sort by fixed section order, then `order` ascending, ties by insertion.
`order` is neither contiguous nor unique, so every consumer stable-sorts.
"""
from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import FormField, LoanProduct
from schemas.form_field import CHOICE_TYPES, FIELD_TYPES, SECTIONS, FormFieldCreate, FormFieldUpdate
from services.errors import NotFoundError, ValidationError
from utils.case import slugify

logger = logging.getLogger(__name__)

_EXPLICIT_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_WIDTHS = ("full", "half", "third")


class FieldLike(Protocol):
    section: str
    name: str
    order: Optional[int]


TField = TypeVar("TField", bound=FieldLike)


def derive_field_name(label: str) -> str:
    """'Company Name' -> 'company-name'. Returns '' when the label has no letters or digits."""
    return slugify(label)


def _section_rank(section: str) -> int:
    try:
        return SECTIONS.index(section)
    except ValueError:
        return len(SECTIONS)


def sort_fields(fields: Iterable[TField]) -> list[TField]:
    """Stable sort by (section, order); input order breaks ties."""
    return sorted(fields, key=lambda f: (_section_rank(f.section), f.order or 0))


def normalize_definition(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate the shape of a field definition (snake_case keys) and return a normalized copy.
    Raises ValidationError with per-attribute messages.
    """
    errors: dict[str, str] = {}

    label = (data.get("label") or "").strip()
    if not label:
        errors["label"] = "Label is required"

    raw_name = (data.get("name") or "").strip()
    if raw_name:
        if not _EXPLICIT_NAME.match(raw_name):
            errors["name"] = "Name may only contain letters, digits, '-' and '_'"
        name = raw_name
    else:
        name = derive_field_name(label)
        if label and not name:
            errors["name"] = "Label must contain at least one letter or digit to derive a name"

    field_type = data.get("type") or "Text"
    if field_type not in FIELD_TYPES:
        errors["type"] = f"Unknown field type '{field_type}'"

    section = data.get("section") or "employment"
    if section not in SECTIONS:
        errors["section"] = f"Unknown section '{section}'"

    options = [o.strip() for o in (data.get("options") or []) if isinstance(o, str) and o.strip()]
    if field_type in CHOICE_TYPES:
        if not options:
            errors["options"] = f"{field_type} fields need at least one option"
        elif len(set(options)) != len(options):
            errors["options"] = "Options must be unique"
    else:
        options = []

    width = data.get("width") or "full"
    if width not in _WIDTHS:
        errors["width"] = f"Unknown width '{width}'"

    if errors:
        raise ValidationError("Invalid form field definition", errors)

    placeholder = (data.get("placeholder") or "").strip() or None
    return {
        **data,
        "label": label,
        "name": name,
        "type": field_type,
        "section": section,
        "options": options,
        "placeholder": placeholder,
        "required": bool(data.get("required")),
        "width": width,
    }


def check_name_available(
    existing: Iterable[Any],
    section: str,
    name: str,
    *,
    exclude: Any = None,
    id_attr: str = "id",
) -> None:
    """Raise ValidationError if `name` is already used in `section` by anything but `exclude`."""
    for other in existing:
        if exclude is not None and getattr(other, id_attr) == exclude:
            continue
        if other.section == section and other.name == name:
            raise ValidationError(
                f"A field named '{name}' already exists in section '{section}'",
                {"name": "Name already in use in this section"},
            )


def _payload(obj: BaseModel | dict[str, Any], *, exclude_unset: bool = False) -> dict[str, Any]:
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=False, exclude_unset=exclude_unset)
    return dict(obj)


async def list_fields(session: AsyncSession, scope_id: str, section: Optional[str] = None) -> list[FormField]:
    stmt = select(FormField).where(FormField.scope_id == scope_id)
    if section is not None:
        stmt = stmt.where(FormField.section == section)
    result = await session.execute(stmt.order_by(FormField.seq, FormField.created_at))
    return sort_fields(result.scalars().all())


async def get_field(session: AsyncSession, field_id: str) -> FormField:
    result = await session.execute(select(FormField).where(FormField.id == field_id))
    field = result.scalar_one_or_none()
    if field is None:
        raise NotFoundError("Form field", field_id)
    return field


async def _next_seq(session: AsyncSession, scope_id: str) -> int:
    result = await session.execute(select(func.max(FormField.seq)).where(FormField.scope_id == scope_id))
    return (result.scalar_one_or_none() or 0) + 1


async def _flush_or_collision(session: AsyncSession, section: str, name: str) -> None:
    try:
        await session.flush()
    except IntegrityError as e:
        raise ValidationError(
            f"A field named '{name}' already exists in section '{section}'",
            {"name": "Name already in use in this section"},
        ) from e


async def create_field(session: AsyncSession, body: FormFieldCreate | dict[str, Any]) -> FormField:
    data = normalize_definition(_payload(body))
    scope_id = (data.get("scope_id") or "").strip()
    if not scope_id:
        raise ValidationError("Invalid form field definition", {"scopeId": "Scope is required"})

    siblings = await list_fields(session, scope_id, data["section"])
    check_name_available(siblings, data["section"], data["name"])

    order = data.get("order")
    if order is None:
        order = len(siblings)

    now = datetime.now(timezone.utc)
    field = FormField(
        id=f"fld-{uuid.uuid4().hex[:12]}",
        scope_id=scope_id,
        section=data["section"],
        name=data["name"],
        label=data["label"],
        type=data["type"],
        required=data["required"],
        placeholder=data["placeholder"],
        options=data["options"],
        order=order,
        seq=await _next_seq(session, scope_id),
        width=data["width"],
        created_at=now,
        updated_at=now,
    )
    session.add(field)
    await _flush_or_collision(session, field.section, field.name)
    logger.info("form_field created id=%s scope=%s section=%s name=%s", field.id, scope_id, field.section, field.name)
    return field


async def update_field(session: AsyncSession, field_id: str, patch: FormFieldUpdate | dict[str, Any]) -> FormField:
    field = await get_field(session, field_id)
    changes = _payload(patch, exclude_unset=True)

    merged = {
        "section": field.section,
        "label": field.label,
        "name": field.name,
        "type": field.type,
        "required": field.required,
        "placeholder": field.placeholder,
        "options": list(field.options or []),
        "order": field.order,
        "width": field.width,
    }
    # Relabelling keeps the machine key stable unless a new name is sent explicitly
    merged.update({k: v for k, v in changes.items() if v is not None or k == "placeholder"})
    data = normalize_definition(merged)

    if data["section"] != field.section or data["name"] != field.name:
        siblings = await list_fields(session, field.scope_id, data["section"])
        check_name_available(siblings, data["section"], data["name"], exclude=field.id)

    for attr in ("section", "label", "name", "type", "required", "placeholder", "options", "width"):
        setattr(field, attr, data[attr])
    if data.get("order") is not None:
        field.order = data["order"]
    field.updated_at = datetime.now(timezone.utc)
    await _flush_or_collision(session, field.section, field.name)
    logger.info("form_field updated id=%s fields=%s", field.id, sorted(changes))
    return field


async def delete_field(session: AsyncSession, field_id: str) -> None:
    """Unconditional: already-submitted dynamicFields keep their values."""
    field = await get_field(session, field_id)
    await session.delete(field)
    await session.flush()
    logger.info("form_field deleted id=%s scope=%s name=%s", field.id, field.scope_id, field.name)


async def resolve_schema(session: AsyncSession, loan: LoanProduct) -> list[FormField]:
    """Category-scoped fields; loan-scoped fields when the category defines none."""
    fields = await list_fields(session, loan.category_id)
    if not fields:
        fields = await list_fields(session, loan.id)
    return fields


def fields_by_section(fields: Sequence[TField]) -> dict[str, list[TField]]:
    grouped: dict[str, list[TField]] = {s: [] for s in SECTIONS}
    for f in sort_fields(fields):
        grouped.setdefault(f.section, []).append(f)
    return grouped
