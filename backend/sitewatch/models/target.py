"""MonitoredTarget model - URLs being monitored."""
from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.db_utils import utcnow

MIN_INTERVAL_SECONDS = 30

STATUS_UP = "Up"
STATUS_DOWN = "Down"
STATUS_UNKNOWN = "Unknown"


class MonitoredTarget(Base):
    """A monitored URL with its own check cadence.

    The ``last_*`` columns cache the newest StatusCheckRecord and are written
    only by the state reconciler.
    """

    __tablename__ = "targets"
    __table_args__ = (
        CheckConstraint(f"interval_seconds >= {MIN_INTERVAL_SECONDS}", name="ck_targets_min_interval"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False, index=True)
    url = Column(String, nullable=False)
    interval_seconds = Column(Integer, nullable=False, default=60)
    created_at = Column(DateTime, default=utcnow)

    last_checked_at = Column(DateTime, nullable=True)
    last_status = Column(String, nullable=False, default=STATUS_UNKNOWN)  # Up, Down, Unknown
    last_latency_ms = Column(Integer, nullable=True)
    last_location = Column(String, nullable=True)

    # Deleting a target deletes its history
    checks = relationship(
        "StatusCheckRecord",
        back_populates="target",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
