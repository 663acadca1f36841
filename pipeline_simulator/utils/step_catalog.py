"""
Step catalog for simulated deployments.

The catalog is the fixed, ordered list of pipeline phases every simulation
walks through. It is defined once at import time and shared read-only by all
simulations; ``TOTAL_STEPS`` feeds the progress projection.
"""

import math
from typing import Sequence, Tuple

from ..models.simulation import StepDefinition

COMPLETED_STEP_NAME = "Completed"

DEPLOYMENT_STEPS: Tuple[StepDefinition, ...] = (
    StepDefinition(name="Initializing", nominal_duration_ms=2000, base_success_probability=95),
    StepDefinition(name="Building Application", nominal_duration_ms=8000, base_success_probability=90),
    StepDefinition(name="Running Tests", nominal_duration_ms=5000, base_success_probability=85),
    StepDefinition(name="Creating Docker Image", nominal_duration_ms=6000, base_success_probability=92),
    StepDefinition(name="Pushing to Registry", nominal_duration_ms=4000, base_success_probability=88),
    StepDefinition(name="Deploying to Environment", nominal_duration_ms=7000, base_success_probability=93),
    StepDefinition(name="Health Checks", nominal_duration_ms=3000, base_success_probability=90),
    StepDefinition(name="Finalizing", nominal_duration_ms=2000, base_success_probability=98),
)

TOTAL_STEPS = len(DEPLOYMENT_STEPS)


def step_name_at(steps: Sequence[StepDefinition], ordinal: int) -> str:
    """Name of the step at ``ordinal``, or "Completed" past the last step."""
    if 0 <= ordinal < len(steps):
        return steps[ordinal].name
    return COMPLETED_STEP_NAME


def round_half_up(value: float) -> int:
    """Round halves upward, unlike the banker's rounding of round()."""
    return math.floor(value + 0.5)


def progress_percent(ordinal: int, total: int) -> int:
    """Rounded share of completed steps, 0-100."""
    if total <= 0:
        return 0
    return round_half_up(ordinal / total * 100)
