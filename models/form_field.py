from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text, UniqueConstraint, func

from database import Base


class FormField(Base):
    __tablename__ = "form_fields"
    __table_args__ = (
        UniqueConstraint("scope_id", "section", "name", name="uq_form_fields_scope_section_name"),
    )

    id = Column(String(64), primary_key=True, index=True)
    # Category id or loan product id; no FK so schema and submitted data stay decoupled
    scope_id = Column(String(64), nullable=False, index=True)
    section = Column(String(32), nullable=False, default="employment")
    name = Column(String(128), nullable=False)
    label = Column(String(256), nullable=False)
    type = Column(String(32), nullable=False, default="Text")
    required = Column(Boolean, nullable=False, default=False)
    placeholder = Column(Text, nullable=True)
    options = Column(JSON, nullable=False, default=list)
    order = Column("sort_order", Integer, nullable=False, default=0)
    # Insertion sequence within the scope, breaks ties on `order`
    seq = Column(Integer, nullable=False, default=0)
    width = Column(String(16), nullable=False, default="full")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
