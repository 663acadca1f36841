"""
Deployment record API routes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..models.api import CreateDeploymentRequest, UpdateDeploymentRequest
from ..models.deployment import DeploymentDescriptor, DeploymentRecord, DeploymentStatus
from ..services.deployment_store import (
    DeploymentNotFoundError,
    DeploymentStore,
    get_deployment_store,
)

router = APIRouter(prefix="/api/deployments", tags=["deployments"])


@router.get("/", response_model=List[DeploymentRecord])
async def list_deployments(
    limit: int = Query(20, ge=1, le=100),
    status: Optional[DeploymentStatus] = None,
    store: DeploymentStore = Depends(get_deployment_store),
):
    """List deployment records, newest first"""
    return store.list(limit=limit, status=status)


@router.get("/{deployment_id}", response_model=DeploymentRecord)
async def get_deployment(
    deployment_id: str,
    store: DeploymentStore = Depends(get_deployment_store),
):
    """Get a deployment record"""
    try:
        return store.get(deployment_id)
    except DeploymentNotFoundError:
        raise HTTPException(status_code=404, detail="Deployment not found")


@router.post("/", response_model=DeploymentRecord, status_code=201)
async def create_deployment(
    request: CreateDeploymentRequest,
    store: DeploymentStore = Depends(get_deployment_store),
):
    """Create a deployment record"""
    descriptor = DeploymentDescriptor(
        service_name=request.service_name,
        version=request.version,
        environment=request.environment,
        deployed_by=request.deployed_by or "system",
    )
    return store.create(descriptor)


@router.put("/{deployment_id}", response_model=DeploymentRecord)
async def update_deployment(
    deployment_id: str,
    request: UpdateDeploymentRequest,
    store: DeploymentStore = Depends(get_deployment_store),
):
    """Update deployment status"""
    # Only fields the client actually sent
    updates = request.model_dump(exclude_unset=True)
    try:
        return store.update(deployment_id, **updates)
    except DeploymentNotFoundError:
        raise HTTPException(status_code=404, detail="Deployment not found")
