from sqlalchemy import JSON, Column, DateTime, String, func

from database import Base


class SettingsDocument(Base):
    """Key/value document used by the site collaborators (navigation, logo, auth toggles, ...)."""

    __tablename__ = "settings_documents"

    key = Column(String(128), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
