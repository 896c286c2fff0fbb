"""Services for probing, scheduling and reconciling checks."""
from .prober import ProberService
from .scheduler import SchedulerService
from .reconciler import StateReconciler
from .websocket_manager import ConnectionManager

__all__ = ["ProberService", "SchedulerService", "StateReconciler", "ConnectionManager"]
