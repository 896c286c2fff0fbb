"""Database models."""
from .target import MonitoredTarget
from .check_record import StatusCheckRecord

__all__ = ["MonitoredTarget", "StatusCheckRecord"]
