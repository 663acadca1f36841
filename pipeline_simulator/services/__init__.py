"""
Business logic services
"""

from .deployment_store import DeploymentNotFoundError, get_deployment_store
from .simulation_engine import get_simulation_engine
from .simulation_registry import SimulationNotFoundError

__all__ = [
    "get_deployment_store",
    "get_simulation_engine",
    "DeploymentNotFoundError",
    "SimulationNotFoundError",
]
