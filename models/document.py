from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class ApplicationDocument(Base):
    __tablename__ = "application_documents"

    id = Column(String(64), primary_key=True, index=True)
    application_id = Column(
        String(64), ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    # Free-text category, e.g. "Selfie", "PAN Card"
    type = Column(String(128), nullable=False)
    name = Column(String(512), nullable=False)
    url = Column(String(1024), nullable=False)
    status = Column(String(16), nullable=False, default="Pending", index=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("LoanApplication", back_populates="documents")
