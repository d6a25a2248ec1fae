"""
Dynamic form renderer: (schema, values) -> (widgets, validity).

Pure functions only; no persistence. Live and preview rendering share `render_form`, so the
preview an administrator approves has exactly the live layout, order and type mapping.
"""
from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, Optional

from schemas.form_field import (
    CHOICE_TYPES,
    SECTION_TITLES,
    SECTIONS,
    FormValidity,
    RenderedForm,
    RenderedSection,
    Widget,
)
from services.field_registry import fields_by_section

# type -> (control, input_type, input_mode)
CONTROL_MAP: dict[str, tuple[str, Optional[str], Optional[str]]] = {
    "Text": ("input", "text", "text"),
    "Number": ("input", "number", "decimal"),
    "Email": ("input", "email", "email"),
    "Phone": ("input", "tel", "tel"),
    "Date": ("input", "date", None),
    "Textarea": ("textarea", None, "text"),
    "Select": ("select", None, None),
    "Radio": ("radio", None, None),
    "Checkbox": ("checkbox", "checkbox", None),
    "File": ("file", "file", None),
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9][0-9\s\-()]{6,19}$")


def _is_iso_date(value: Any) -> bool:
    """Whole value must be an ISO date or datetime; trailing text is rejected."""
    if isinstance(value, date):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def default_placeholder(field: Any) -> Optional[str]:
    if field.type == "Email":
        return "Enter email address"
    if field.type == "Phone":
        return "Enter phone number"
    if field.type in ("Text", "Number", "Textarea"):
        return f"Enter {(field.label or field.name).lower()}"
    if field.type == "Select":
        return "-- Select an option --"
    return None


def is_empty(field_type: str, value: Any) -> bool:
    if value is None:
        return True
    if field_type == "Checkbox":
        return value is not True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def check_value(field: Any, value: Any) -> Optional[str]:
    """Return an error message for a non-empty value of the wrong shape, else None."""
    t = field.type
    if t in CHOICE_TYPES:
        if not isinstance(value, str) or value not in (field.options or []):
            return f"'{value}' is not one of the allowed options"
    elif t == "Number":
        if isinstance(value, bool):
            return "Must be a number"
        try:
            number = float(value)
        except (TypeError, ValueError):
            return "Must be a number"
        if not math.isfinite(number):
            return "Must be a number"
    elif t == "Email":
        if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
            return "Must be a valid email address"
    elif t == "Phone":
        if not isinstance(value, str) or not PHONE_RE.match(value.strip()):
            return "Must be a valid phone number"
    elif t == "Date":
        if not _is_iso_date(value):
            return "Must be a date (YYYY-MM-DD)"
    elif t == "Checkbox":
        if not isinstance(value, bool):
            return "Must be true or false"
    elif t == "File":
        refs = value if isinstance(value, list) else [value]
        for ref in refs:
            if isinstance(ref, str) and ref.strip():
                continue
            if isinstance(ref, Mapping) and ref.get("url"):
                continue
            return "Must be one or more uploaded file references"
    return None


def validate_values(fields: Sequence[Any], values: Optional[Mapping[str, Any]]) -> FormValidity:
    """Required-but-empty fields go to `missing`; malformed non-empty values go to `invalid`."""
    values = values or {}
    validity = FormValidity()
    grouped = fields_by_section(fields)
    for section in SECTIONS:
        for field in grouped.get(section, []):
            value = values.get(field.name)
            if is_empty(field.type, value):
                if field.required:
                    validity.missing.append(field.name)
                continue
            error = check_value(field, value)
            if error:
                validity.invalid[field.name] = error
    return validity


def _widget(field: Any, position: int, value: Any, preview: bool) -> Widget:
    control, input_type, input_mode = CONTROL_MAP[field.type]
    return Widget(
        name=field.name,
        label=field.label or field.name,
        field_type=field.type,
        control=control,
        input_type=input_type,
        input_mode=input_mode,
        required=bool(field.required),
        placeholder=field.placeholder or default_placeholder(field),
        options=list(field.options or []) if field.type in CHOICE_TYPES else [],
        multiple=field.type == "File",
        width=field.width or "full",
        value=value,
        disabled=preview,
        position=position,
    )


def _initial_value(field: Any, values: Mapping[str, Any]) -> Any:
    if field.name in values:
        return values[field.name]
    if field.type == "Checkbox":
        return False
    if field.type == "File":
        return []
    return ""


def render_form(
    fields: Sequence[Any],
    values: Optional[Mapping[str, Any]] = None,
    *,
    preview: bool = False,
) -> RenderedForm:
    """
    One widget per field, grouped into the fixed sections, ordered by `order` then insertion.
    Preview mode disables every control and ignores values; layout is otherwise identical.
    Empty sections are omitted.
    """
    values = {} if preview else dict(values or {})
    grouped = fields_by_section(fields)
    sections: list[RenderedSection] = []
    for section in SECTIONS:
        section_fields = grouped.get(section) or []
        if not section_fields:
            continue
        widgets = [
            _widget(f, i, None if preview else _initial_value(f, values), preview)
            for i, f in enumerate(section_fields, start=1)
        ]
        sections.append(RenderedSection(section=section, title=SECTION_TITLES[section], widgets=widgets))

    validity = FormValidity() if preview else validate_values(fields, values)
    return RenderedForm(preview=preview, sections=sections, validity=validity)


def display_value(value: Any) -> dict[str, Any]:
    """
    Type-switch a stored dynamic value for review screens.
    Returns {"kind": "files", "files": [...]}, {"kind": "link", "url": ...}, or {"kind": "text", "text": ...}.
    """
    if isinstance(value, Mapping) and set(value) == {"kind", "value"}:
        value = value["value"]
    if isinstance(value, list) and value and all(isinstance(v, Mapping) and v.get("url") for v in value):
        return {
            "kind": "files",
            "files": [{"name": v.get("name") or f"File {i}", "url": v["url"]} for i, v in enumerate(value, start=1)],
        }
    if isinstance(value, str) and (value.startswith("/uploads/") or value.startswith("http")):
        return {"kind": "link", "url": value}
    if isinstance(value, (Mapping, list)):
        return {"kind": "text", "text": json.dumps(value, indent=2, default=str)}
    if isinstance(value, bool):
        return {"kind": "text", "text": "Yes" if value else "No"}
    return {"kind": "text", "text": "" if value is None else str(value)}
