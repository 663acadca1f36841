"""
In-flight and finished simulation state, keyed by deployment id.

Each ``SimulationState`` has exactly one writer (the engine task that owns
it) and any number of readers. Every mutation and every read goes through the
state's lock, so a reader never sees a log entry without its matching
status/ordinal change or the other way round. Entries are never evicted.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..models.simulation import (
    LogEntry,
    SimulationSnapshot,
    SimulationStatus,
    StepDefinition,
    utc_now,
)
from ..utils.step_catalog import progress_percent, step_name_at


class SimulationNotFoundError(KeyError):
    """No simulation is registered under the requested id"""

    def __init__(self, deployment_id: str):
        super().__init__(deployment_id)
        self.deployment_id = deployment_id

    def __str__(self) -> str:
        return f"Simulation not found: {self.deployment_id}"


class SimulationState:
    """Mutable state of one simulation"""

    def __init__(
        self,
        deployment_id: str,
        steps: Sequence[StepDefinition],
        start_clock: float = 0.0,
    ):
        self.deployment_id = deployment_id
        self.steps = steps
        self.started_at: datetime = utc_now()
        # Monotonic reading at launch; durations are measured from it
        self.start_clock = start_clock
        self._lock = threading.Lock()
        self._status = SimulationStatus.RUNNING
        self._ordinal = 0
        self._logs: List[LogEntry] = []
        self._cancel_requested = False

    @property
    def status(self) -> SimulationStatus:
        with self._lock:
            return self._status

    @property
    def ordinal(self) -> int:
        with self._lock:
            return self._ordinal

    @property
    def cancel_requested(self) -> bool:
        with self._lock:
            return self._cancel_requested

    def request_cancel(self) -> SimulationStatus:
        """Flag the simulation for cancellation at its next checkpoint.

        Returns the status observed while setting the flag; terminal
        simulations are left untouched.
        """
        with self._lock:
            if self._status is SimulationStatus.RUNNING:
                self._cancel_requested = True
            return self._status

    def add_log(self, message: str, level: str = "info", ordinal: Optional[int] = None) -> bool:
        """Append a log entry, optionally advancing the ordinal with it.

        Returns False and changes nothing once the simulation is terminal.
        """
        with self._lock:
            if self._status is not SimulationStatus.RUNNING:
                return False
            self._logs.append(LogEntry(message=message, level=level))
            if ordinal is not None and ordinal > self._ordinal:
                self._ordinal = ordinal
            return True

    def finish(
        self,
        status: SimulationStatus,
        message: Optional[str] = None,
        level: str = "info",
        ordinal: Optional[int] = None,
    ) -> bool:
        """Make the single terminal transition.

        Checks and sets the status in one locked step. Only the first caller
        gets True; that caller owns finalizing the deployment record.
        """
        if not status.is_terminal:
            raise ValueError(f"Not a terminal status: {status.value}")
        with self._lock:
            if self._status is not SimulationStatus.RUNNING:
                return False
            if message is not None:
                self._logs.append(LogEntry(message=message, level=level))
            if ordinal is not None and ordinal > self._ordinal:
                self._ordinal = ordinal
            self._status = status
            return True

    def logs(self) -> List[LogEntry]:
        with self._lock:
            return list(self._logs)

    def snapshot(self) -> SimulationSnapshot:
        """Consistent copy of status, ordinal and logs"""
        with self._lock:
            status = self._status
            ordinal = self._ordinal
            logs = list(self._logs)

        total = len(self.steps)
        return SimulationSnapshot(
            deployment_id=self.deployment_id,
            status=status,
            current_step=ordinal,
            total_steps=total,
            current_step_name=step_name_at(self.steps, ordinal),
            progress=progress_percent(ordinal, total),
            started_at=self.started_at,
            logs=logs,
        )


class SimulationRegistry:
    """Thread-safe mapping of deployment id to SimulationState"""

    def __init__(self):
        self._lock = threading.Lock()
        self._states: Dict[str, SimulationState] = {}

    def insert(self, state: SimulationState):
        with self._lock:
            if state.deployment_id in self._states:
                raise ValueError(f"Simulation already registered: {state.deployment_id}")
            self._states[state.deployment_id] = state

    def get(self, deployment_id: str) -> SimulationState:
        with self._lock:
            state = self._states.get(deployment_id)
        if state is None:
            raise SimulationNotFoundError(deployment_id)
        return state

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def states(self) -> List[SimulationState]:
        with self._lock:
            return list(self._states.values())

    def __contains__(self, deployment_id: object) -> bool:
        with self._lock:
            return deployment_id in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
