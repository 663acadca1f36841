"""
Deployment record models
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .simulation import utc_now


class DeploymentStatus(str, Enum):
    """Deployment record status enum"""

    IN_PROGRESS = "in-progress"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DeploymentDescriptor(BaseModel):
    """What to deploy, where, and on whose behalf"""

    service_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    environment: str = Field(min_length=1)
    deployed_by: str = "simulator"


class DeploymentRecord(BaseModel):
    """Persistent record of one deployment"""

    id: str
    service_name: str
    version: str
    environment: str
    deployed_by: str = "system"
    status: DeploymentStatus = DeploymentStatus.IN_PROGRESS
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # seconds
