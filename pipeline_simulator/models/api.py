"""
API request/response models
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .deployment import DeploymentStatus
from .simulation import LogEntry, SimulationStatus


class StartSimulationRequest(BaseModel):
    """Request to start a simulated deployment"""
    service_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    environment: str = Field(min_length=1)
    deployed_by: Optional[str] = None  # Defaults to "simulator"


class StartSimulationResponse(BaseModel):
    """Acknowledgement of a started simulation"""
    deployment_id: str
    status: str = "started"
    total_steps: int


class SimulationLogsResponse(BaseModel):
    """Full log trace of a simulation"""
    deployment_id: str
    logs: List[LogEntry] = []


class StopSimulationResponse(BaseModel):
    """Result of a stop request"""
    deployment_id: str
    status: str  # cancelling | completed | failed | cancelled


class DeploymentTemplate(BaseModel):
    """Predefined service/environment combination offered to clients"""
    id: str
    name: str
    description: str
    services: List[str] = []
    environments: List[str] = []


class CreateDeploymentRequest(BaseModel):
    """Request to create a deployment record directly"""
    service_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    environment: str = Field(min_length=1)
    deployed_by: Optional[str] = None  # Defaults to "system"


class UpdateDeploymentRequest(BaseModel):
    """Partial update of a deployment record"""
    status: DeploymentStatus
    end_time: Optional[datetime] = None
    duration: Optional[int] = None


class SimulationSummary(BaseModel):
    """Simulation entry for listing"""
    deployment_id: str
    status: SimulationStatus
    progress: int
    started_at: datetime
