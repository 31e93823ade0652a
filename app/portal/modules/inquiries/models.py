from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.portal.models import Base
from app.portal.utils import utcnow


class ContactInquiry(Base):
    __tablename__ = "contact_inquiries"
    __table_args__ = (
        Index("idx_contact_inquiries_created_at", "created_at"),
        Index("idx_contact_inquiries_read_archived", "is_read", "is_archived"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Required
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email_address: Mapped[str] = mapped_column(String(100), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Optional
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    inquiry_type: Mapped[str] = mapped_column(String(50), nullable=False, default="General")  # General, Scholarship, Travel, Education

    # Triage
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)  # first read only
    admin_notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
