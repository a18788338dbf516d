"""
Match Planner - round-robin tournament scheduling with constraints and multi-leg support.
"""

__version__ = "0.1.0"

from .config import SchedulerConfig
from .constraints import ConstraintSet
from .context import SchedulingContext
from .engine import RoundRobinScheduler, schedule
from .exceptions import (
    ImpossibleConstraintsError,
    IncompleteScheduleError,
    InvalidConfigurationError,
    SchedulingError,
    UnsupportedOperationError,
)
from .export import write_excel
from .legs import MirroredLegStrategy, RepeatedLegStrategy, ShuffledLegStrategy
from .models import Event, Participant, Round, RoundSchedule, Schedule

__all__ = [
    "SchedulerConfig",
    "ConstraintSet",
    "SchedulingContext",
    "RoundRobinScheduler",
    "schedule",
    "SchedulingError",
    "InvalidConfigurationError",
    "IncompleteScheduleError",
    "ImpossibleConstraintsError",
    "UnsupportedOperationError",
    "write_excel",
    "MirroredLegStrategy",
    "RepeatedLegStrategy",
    "ShuffledLegStrategy",
    "Participant",
    "Event",
    "Round",
    "RoundSchedule",
    "Schedule",
]
