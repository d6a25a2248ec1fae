"""Shared utilities for the backend."""
from utils.case import dict_keys_to_camel, slugify

__all__ = [
    "dict_keys_to_camel",
    "slugify",
]
