"""
Pydantic models for Pipeline Simulator
"""

from .api import (
    CreateDeploymentRequest,
    DeploymentTemplate,
    SimulationLogsResponse,
    SimulationSummary,
    StartSimulationRequest,
    StartSimulationResponse,
    StopSimulationResponse,
    UpdateDeploymentRequest,
)
from .deployment import (
    DeploymentDescriptor,
    DeploymentRecord,
    DeploymentStatus,
)
from .simulation import (
    LogEntry,
    SimulationSnapshot,
    SimulationStatus,
    StepDefinition,
)

__all__ = [
    # Simulation models
    "StepDefinition",
    "LogEntry",
    "SimulationStatus",
    "SimulationSnapshot",
    # Deployment models
    "DeploymentDescriptor",
    "DeploymentRecord",
    "DeploymentStatus",
    # API models
    "StartSimulationRequest",
    "StartSimulationResponse",
    "SimulationLogsResponse",
    "SimulationSummary",
    "StopSimulationResponse",
    "DeploymentTemplate",
    "CreateDeploymentRequest",
    "UpdateDeploymentRequest",
]
