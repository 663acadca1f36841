"""
Simulation state models
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SimulationStatus(str, Enum):
    """Simulation status enum"""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not SimulationStatus.RUNNING


class StepDefinition(BaseModel):
    """One phase of the simulated pipeline"""

    model_config = ConfigDict(frozen=True)

    name: str
    nominal_duration_ms: int = Field(ge=0)
    base_success_probability: float = Field(ge=0, le=100)

    @property
    def duration_seconds(self) -> float:
        return self.nominal_duration_ms / 1000


class LogEntry(BaseModel):
    """Log entry"""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    level: str = "info"  # info | error
    message: str


class SimulationSnapshot(BaseModel):
    """Point-in-time view of one simulation, as served to status queries"""

    deployment_id: str
    status: SimulationStatus
    current_step: int
    total_steps: int
    current_step_name: str
    progress: int
    started_at: datetime
    logs: List[LogEntry] = []
