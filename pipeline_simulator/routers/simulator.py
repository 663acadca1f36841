"""
Deployment simulator API routes
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..models.api import (
    DeploymentTemplate,
    SimulationLogsResponse,
    SimulationSummary,
    StartSimulationRequest,
    StartSimulationResponse,
    StopSimulationResponse,
)
from ..models.deployment import DeploymentDescriptor
from ..models.simulation import SimulationSnapshot, SimulationStatus, StepDefinition
from ..services.simulation_engine import SimulationEngine, get_simulation_engine
from ..services.simulation_registry import SimulationNotFoundError

router = APIRouter(prefix="/api/simulator", tags=["simulator"])

DEPLOYMENT_TEMPLATES = [
    DeploymentTemplate(
        id="web-app",
        name="Web Application",
        description="Standard web application deployment",
        services=["Frontend", "Backend", "Database"],
        environments=["Development", "Staging", "Production"],
    ),
    DeploymentTemplate(
        id="microservice",
        name="Microservice",
        description="Individual microservice deployment",
        services=["User Service", "Payment Service", "Notification Service"],
        environments=["Development", "Staging", "Production"],
    ),
    DeploymentTemplate(
        id="mobile-backend",
        name="Mobile Backend",
        description="Mobile application backend services",
        services=["API Gateway", "Auth Service", "Push Notifications"],
        environments=["Development", "Staging", "Production"],
    ),
]


@router.post("/start", response_model=StartSimulationResponse)
async def start_simulation(
    request: StartSimulationRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
):
    """Start a simulated deployment"""
    descriptor = DeploymentDescriptor(
        service_name=request.service_name,
        version=request.version,
        environment=request.environment,
        deployed_by=request.deployed_by or "simulator",
    )
    return await engine.start(descriptor)


@router.get("/status/{deployment_id}", response_model=SimulationSnapshot)
async def get_simulation_status(
    deployment_id: str,
    engine: SimulationEngine = Depends(get_simulation_engine),
):
    """Get current simulation status"""
    try:
        return engine.status(deployment_id)
    except SimulationNotFoundError:
        raise HTTPException(status_code=404, detail="Simulation not found")


@router.get("/logs/{deployment_id}", response_model=SimulationLogsResponse)
async def get_simulation_logs(
    deployment_id: str,
    engine: SimulationEngine = Depends(get_simulation_engine),
):
    """Get simulation logs"""
    try:
        logs = engine.logs(deployment_id)
    except SimulationNotFoundError:
        raise HTTPException(status_code=404, detail="Simulation not found")

    return SimulationLogsResponse(deployment_id=deployment_id, logs=logs)


@router.post("/stop/{deployment_id}", response_model=StopSimulationResponse)
async def stop_simulation(
    deployment_id: str,
    engine: SimulationEngine = Depends(get_simulation_engine),
):
    """Stop a running simulation at its next step boundary"""
    try:
        status = engine.stop(deployment_id)
    except SimulationNotFoundError:
        raise HTTPException(status_code=404, detail="Simulation not found")

    return StopSimulationResponse(
        deployment_id=deployment_id,
        status="cancelling" if status is SimulationStatus.RUNNING else status.value,
    )


@router.get("/steps", response_model=List[StepDefinition])
async def list_steps(engine: SimulationEngine = Depends(get_simulation_engine)):
    """Get the ordered pipeline steps"""
    return engine.catalog()


@router.get("/templates", response_model=List[DeploymentTemplate])
async def list_templates():
    """Get deployment templates"""
    return DEPLOYMENT_TEMPLATES


@router.get("/", response_model=List[SimulationSummary])
async def list_simulations(engine: SimulationEngine = Depends(get_simulation_engine)):
    """List known simulations, newest first"""
    return [
        SimulationSummary(
            deployment_id=s.deployment_id,
            status=s.status,
            progress=s.progress,
            started_at=s.started_at,
        )
        for s in engine.list_simulations()
    ]
