"""Generic key/value settings documents (navigation, logo, banners, auth toggles)."""
import logging
import re
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import SettingsDocument
from services.errors import NotFoundError, ValidationError

router = APIRouter(prefix="/api/settings", tags=["settings"])

logger = logging.getLogger(__name__)

_KEY = re.compile(r"^[a-z0-9][a-z0-9_.-]{0,127}$")


def _settings_to_response(doc: SettingsDocument) -> dict[str, Any]:
    return {
        "key": doc.key,
        "value": doc.value,
        "updatedAt": doc.updated_at.isoformat() if doc.updated_at else None,
    }


@router.get("/{key}", response_model=dict)
async def get_settings(key: str, db: AsyncSession = Depends(get_db)):
    doc = (await db.execute(select(SettingsDocument).where(SettingsDocument.key == key))).scalar_one_or_none()
    if doc is None:
        raise NotFoundError("Settings", key)
    return _settings_to_response(doc)


@router.put("/{key}", response_model=dict)
async def put_settings(key: str, value: Any = Body(...), db: AsyncSession = Depends(get_db)):
    """Replace the whole document stored under `key`."""
    if not _KEY.match(key):
        raise ValidationError("Invalid settings key", {"key": "Lowercase letters, digits, '.', '_' and '-' only"})
    doc = (await db.execute(select(SettingsDocument).where(SettingsDocument.key == key))).scalar_one_or_none()
    now = datetime.now(timezone.utc)
    if doc is None:
        doc = SettingsDocument(key=key, value=value, updated_at=now)
        db.add(doc)
    else:
        doc.value = value
        doc.updated_at = now
    await db.flush()
    logger.info("settings saved key=%s", key)
    return _settings_to_response(doc)
