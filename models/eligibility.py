from sqlalchemy import Column, Date, DateTime, Float, String, Text, func

from database import Base


class EligibilitySubmission(Base):
    __tablename__ = "eligibility_submissions"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=False, index=True)
    personal_email = Column(String(256), nullable=True)
    # Plain reference; eligibility records outlive product edits
    loan_id = Column(String(64), nullable=True, index=True)
    employment_type = Column(String(32), nullable=False)
    net_monthly_income = Column(Float, nullable=False)
    pancard = Column(String(16), nullable=True)
    dob = Column(Date, nullable=True)
    gender = Column(String(16), nullable=True)
    company_name = Column(String(256), nullable=True)
    next_salary_date = Column(Date, nullable=True)
    pin_code = Column(String(6), nullable=False)
    state = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
