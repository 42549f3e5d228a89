from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class ArticleRecord(Base):
    """
    Row shape of the ``articles`` table.

    Rows are never physically removed by the repository layer; a non-null
    ``deleted_at`` retires the row from every read, update and delete.
    """

    __tablename__ = "articles"

    # Caller-assigned; native UUID on PostgreSQL, CHAR(32) hex elsewhere.
    article_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
