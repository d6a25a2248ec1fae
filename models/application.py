from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    application_number = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(String(64), nullable=True, index=True)
    loan_id = Column(String(64), ForeignKey("loan_products.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="Submitted", index=True)
    # Fixed-shape payloads (snake_case keys)
    personal_info = Column(JSON, nullable=False)
    address = Column(JSON, nullable=False)
    employment_info = Column(JSON, nullable=False)
    loan_details = Column(JSON, nullable=False)
    # Schema-driven values: {field_name: {"kind": ..., "value": ...}}
    dynamic_fields = Column(JSON, nullable=False, default=dict)
    rejection_reason = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship(
        "ApplicationDocument",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationDocument.position",
        lazy="selectin",
    )
