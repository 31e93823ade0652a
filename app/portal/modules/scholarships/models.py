from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.portal.models import Base
from app.portal.utils import utcnow


class Scholarship(Base):
    __tablename__ = "scholarships"
    __table_args__ = (
        Index("idx_scholarships_active_deadline", "is_active", "deadline"),
        Index("idx_scholarships_country", "country"),
        Index("idx_scholarships_field_of_study", "field_of_study"),
        Index("idx_scholarships_degree_level", "degree_level"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Required
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    field_of_study: Mapped[str] = mapped_column(String(100), nullable=False)
    degree_level: Mapped[str] = mapped_column(String(50), nullable=False)  # e.g. "MASTER'S DEGREE"
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)  # naive UTC
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="USD")
    eligibility: Mapped[str] = mapped_column(Text, nullable=False)
    required_documents: Mapped[str] = mapped_column(Text, nullable=False)

    # Optional
    application_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    official_website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    additional_info: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)  # internal, never shown publicly

    # Flags
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    def is_open(self, now: datetime | None = None) -> bool:
        """Deadline not yet passed (equal-to-now still counts as open)."""
        return self.deadline >= (now or utcnow())

    def __repr__(self) -> str:
        return f"<Scholarship id={self.id} title={self.title!r}>"
