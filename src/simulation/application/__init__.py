from .lifecycle_scheduler import LifecycleScheduler, ScheduledEvent
from .simulation_service import SimulationService

__all__ = ["LifecycleScheduler", "ScheduledEvent", "SimulationService"]
