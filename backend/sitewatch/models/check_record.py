"""StatusCheckRecord model - append-only check history."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.db_utils import utcnow


class StatusCheckRecord(Base):
    """One completed check attempt. Never updated once written."""

    __tablename__ = "status_checks"
    __table_args__ = (
        Index("ix_status_checks_target_created", "target_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_id = Column(Integer, ForeignKey("targets.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    status = Column(String, nullable=False)  # Up, Down
    latency_ms = Column(Integer, nullable=True)  # NULL if no response was measured
    status_code = Column(Integer, nullable=True)
    location = Column(String, nullable=True)

    target = relationship("MonitoredTarget", back_populates="checks")
