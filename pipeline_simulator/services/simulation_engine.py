"""
Deployment simulation engine
"""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from ..config import settings
from ..models.api import StartSimulationResponse
from ..models.deployment import DeploymentDescriptor, DeploymentStatus
from ..models.simulation import (
    LogEntry,
    SimulationSnapshot,
    SimulationStatus,
    StepDefinition,
    utc_now,
)
from ..utils.step_catalog import DEPLOYMENT_STEPS, round_half_up
from .deployment_store import DeploymentRecordSink, get_deployment_store
from .simulation_registry import SimulationRegistry, SimulationState

logger = logging.getLogger(__name__)

SECONDARY_FAILURE_RATE = 0.1

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]

# Simulation outcome -> deployment record status
RECORD_STATUS = {
    SimulationStatus.COMPLETED: DeploymentStatus.SUCCESS,
    SimulationStatus.FAILED: DeploymentStatus.FAILED,
    SimulationStatus.CANCELLED: DeploymentStatus.CANCELLED,
}


def step_fails(
    step: StepDefinition,
    rng: random.Random,
    secondary_failure_rate: float = SECONDARY_FAILURE_RATE,
) -> bool:
    """Decide whether a step fails.

    A step fails only when its primary draw misses the base success
    probability AND a second draw lands inside the secondary failure rate,
    so the net failure chance is ``(1 - p/100) * secondary_failure_rate``.
    """
    primary_success = rng.uniform(0, 100) < step.base_success_probability
    return not primary_success and rng.random() < secondary_failure_rate


class SimulationEngine:
    """Runs one background task per simulated deployment.

    Collaborators are injectable so tests can drive the failure model and
    the step timing deterministically:

    - ``store``: creates and finalizes deployment records
    - ``rng``: anything with ``uniform(a, b)`` and ``random()``
    - ``sleep``: awaited once per step with the step's duration in seconds
    - ``clock``: monotonic seconds, used for the recorded duration
    """

    def __init__(
        self,
        store: DeploymentRecordSink,
        steps: Sequence[StepDefinition] = DEPLOYMENT_STEPS,
        registry: Optional[SimulationRegistry] = None,
        rng: Optional[random.Random] = None,
        sleep: Optional[Sleep] = None,
        clock: Clock = time.monotonic,
        secondary_failure_rate: float = SECONDARY_FAILURE_RATE,
        step_duration_scale: float = 1.0,
    ):
        self.store = store
        self.steps = tuple(steps)
        self.registry = registry if registry is not None else SimulationRegistry()
        self.rng = rng or random.Random()
        self.sleep = sleep or asyncio.sleep
        self.clock = clock
        self.secondary_failure_rate = secondary_failure_rate
        self.step_duration_scale = step_duration_scale
        self._running_tasks: Dict[str, asyncio.Task] = {}

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def catalog(self) -> List[StepDefinition]:
        """Ordered step definitions shared by every simulation"""
        return list(self.steps)

    async def start(self, descriptor: DeploymentDescriptor) -> StartSimulationResponse:
        """Create the deployment record and launch its simulation.

        Returns as soon as the background task is scheduled.
        """
        record = self.store.create(descriptor)

        state = SimulationState(record.id, self.steps, start_clock=self.clock())
        try:
            self.registry.insert(state)

            task = asyncio.create_task(
                self._run_simulation(state), name=f"simulation-{record.id}"
            )
        except Exception as e:
            logger.error(f"Failed to launch simulation {record.id}: {e}")
            self._finish(
                state,
                state.start_clock,
                SimulationStatus.FAILED,
                message=f"Simulation error: {e}",
                level="error",
            )
            raise

        self._running_tasks[record.id] = task
        task.add_done_callback(lambda _t, did=record.id: self._running_tasks.pop(did, None))

        logger.info(
            f"Started simulation {record.id} for {descriptor.service_name} "
            f"{descriptor.version} -> {descriptor.environment}"
        )
        return StartSimulationResponse(deployment_id=record.id, total_steps=self.total_steps)

    async def _run_simulation(self, state: SimulationState):
        """Advance through the step catalog until done, failed or cancelled"""
        started = state.start_clock
        cancelled = False

        try:
            for i, step in enumerate(self.steps):
                if state.cancel_requested:
                    cancelled = True
                    break

                state.add_log(f"Starting {step.name}...")

                await self.sleep(step.duration_seconds * self.step_duration_scale)

                if step_fails(step, self.rng, self.secondary_failure_rate):
                    self._finish(
                        state,
                        started,
                        SimulationStatus.FAILED,
                        message=f"{step.name} failed: Simulated error occurred",
                        level="error",
                    )
                    return

                state.add_log(f"{step.name} completed successfully", ordinal=i + 1)

            if cancelled:
                self._finish(state, started, SimulationStatus.CANCELLED)
            else:
                self._finish(
                    state,
                    started,
                    SimulationStatus.COMPLETED,
                    message="Deployment completed successfully!",
                    ordinal=self.total_steps,
                )

        except asyncio.CancelledError:
            # Task cancelled from outside (shutdown); record it, then let it propagate
            self._finish(state, started, SimulationStatus.CANCELLED)
            raise

        except Exception as e:
            logger.exception(f"Simulation {state.deployment_id} crashed: {e}")
            self._finish(
                state,
                started,
                SimulationStatus.FAILED,
                message=f"Simulation error: {e}",
                level="error",
            )

    def _finish(
        self,
        state: SimulationState,
        started: float,
        status: SimulationStatus,
        message: Optional[str] = None,
        level: str = "info",
        ordinal: Optional[int] = None,
    ):
        """Commit the terminal transition and finalize the record once"""
        if not state.finish(status, message=message, level=level, ordinal=ordinal):
            return

        duration = round_half_up(max(self.clock() - started, 0.0))
        try:
            self.store.update(
                state.deployment_id,
                status=RECORD_STATUS[status],
                end_time=utc_now(),
                duration=duration,
            )
        except Exception as e:
            logger.error(f"Failed to finalize deployment record {state.deployment_id}: {e}")

        logger.info(f"Simulation {state.deployment_id} {status.value} after {duration}s")

    def stop(self, deployment_id: str) -> SimulationStatus:
        """Request cancellation; the task acts on it at its next checkpoint.

        Returns the status seen when the request was made. Raises
        SimulationNotFoundError for unknown ids.
        """
        state = self.registry.get(deployment_id)
        status = state.request_cancel()
        if status is SimulationStatus.RUNNING:
            logger.info(f"Cancellation requested for simulation {deployment_id}")
        return status

    def status(self, deployment_id: str) -> SimulationSnapshot:
        return self.registry.get(deployment_id).snapshot()

    def logs(self, deployment_id: str) -> List[LogEntry]:
        return self.registry.get(deployment_id).logs()

    def list_simulations(self) -> List[SimulationSnapshot]:
        """Snapshots of every known simulation, newest first"""
        snapshots = [state.snapshot() for state in self.registry.states()]
        snapshots.sort(key=lambda s: s.started_at, reverse=True)
        return snapshots

    def is_running(self, deployment_id: str) -> bool:
        return deployment_id in self._running_tasks

    async def wait(self, deployment_id: str, timeout: Optional[float] = None) -> SimulationSnapshot:
        """Wait for a simulation's task to end, without cancelling it on timeout"""
        state = self.registry.get(deployment_id)
        task = self._running_tasks.get(deployment_id)
        if task is not None:
            await asyncio.wait({task}, timeout=timeout)
        return state.snapshot()

    async def shutdown(self):
        """Cancel every running simulation and wait for them to settle"""
        for state in self.registry.states():
            state.request_cancel()

        tasks = list(self._running_tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} running simulation(s)")

        # A task cancelled before its first step never reaches its handler
        for state in self.registry.states():
            if state.status is SimulationStatus.RUNNING:
                self._finish(state, state.start_clock, SimulationStatus.CANCELLED)


# Global instance
_simulation_engine: Optional[SimulationEngine] = None


def get_simulation_engine() -> SimulationEngine:
    global _simulation_engine
    if _simulation_engine is None:
        _simulation_engine = SimulationEngine(
            store=get_deployment_store(),
            secondary_failure_rate=settings.secondary_failure_rate,
            step_duration_scale=settings.step_duration_scale,
        )
    return _simulation_engine
