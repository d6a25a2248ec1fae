from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(256), unique=True, nullable=False)
    slug = Column(String(128), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    image = Column(String(512), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    order = Column("sort_order", Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    loans = relationship("LoanProduct", back_populates="category")


class LoanProduct(Base):
    __tablename__ = "loan_products"

    id = Column(String(64), primary_key=True, index=True)
    category_id = Column(String(64), ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    slug = Column(String(128), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    # {"min": 10.5, "max": 18.0, "default": 12.0} (annual percent)
    interest_rate = Column(JSON, nullable=False)
    min_loan_amount = Column(Float, nullable=False)
    max_loan_amount = Column(Float, nullable=False)
    min_tenure = Column(Integer, nullable=False)
    max_tenure = Column(Integer, nullable=False)
    image = Column(String(512), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    order = Column("sort_order", Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="loans")
