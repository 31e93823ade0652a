from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.portal.models import Base
from app.portal.utils import utcnow


class Page(Base):
    __tablename__ = "pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)  # public URL key
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    hero_image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    content_html: Mapped[str] = mapped_column(Text, nullable=False)  # rendered unescaped
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    seo_description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
