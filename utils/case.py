"""
Key and slug normalization for API responses and machine names.
Camel-casing uses Pydantic's alias generator so responses match the request schemas.
"""
import re
from typing import Any

from pydantic.alias_generators import to_camel

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def dict_keys_to_camel(obj: Any) -> Any:
    """
    Recursively convert snake_case dict keys to camelCase for API responses.
    Only for fixed-shape payloads; user-authored keys (dynamic field names) must not pass through here.
    """
    if isinstance(obj, dict):
        return {to_camel(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj


def slugify(text: str, separator: str = "-") -> str:
    """
    Lowercase, collapse every run of non-alphanumerics into one separator, trim separators.
    'Company Name' -> 'company-name', '  PAN / Tax ID  ' -> 'pan-tax-id'.
    """
    return _NON_ALNUM_RUN.sub(separator, (text or "").lower()).strip(separator)
