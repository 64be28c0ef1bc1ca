import uuid
from datetime import datetime

import pytz
from sqlalchemy import JSON, Column, Date, DateTime, Float, Index, String, Text, UniqueConstraint

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(pytz.UTC)


class MacroLogRow(Base):
    __tablename__ = "macro_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False)
    date = Column(Date, nullable=False)
    macro_id = Column(String(50), nullable=False)
    points_moved = Column(Float)
    direction = Column(String(20))
    displacement_quality = Column(String(20))
    liquidity_sweep = Column(String(20))
    note = Column(Text, nullable=False, default="")
    tv_links = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "date", "macro_id", name="uq_macro_logs_user_date_macro"),
        Index("idx_macro_logs_user_date", "user_id", "date"),
    )
