"""
Shared pytest fixtures for pipeline simulator tests
"""

import sys
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pipeline_simulator.models.deployment import DeploymentDescriptor
from pipeline_simulator.services.deployment_store import DeploymentStore, get_deployment_store
from pipeline_simulator.services.simulation_engine import SimulationEngine, get_simulation_engine

from tests.simulation.sources import ScriptedRandom


@pytest.fixture
def descriptor() -> DeploymentDescriptor:
    """Return the descriptor used by most scenarios"""
    return DeploymentDescriptor(
        service_name="User Service",
        version="1.0.0",
        environment="Development",
    )


@pytest.fixture
def store() -> DeploymentStore:
    """Fresh in-memory deployment store"""
    return DeploymentStore()


@pytest.fixture
def spy_store(store: DeploymentStore) -> MagicMock:
    """Store whose create/update calls are recorded but still applied"""
    return MagicMock(wraps=store)


@pytest.fixture
def make_engine(store: DeploymentStore) -> Callable[..., SimulationEngine]:
    """Factory for engines that succeed at every step unless told otherwise"""

    def _make(**kwargs) -> SimulationEngine:
        kwargs.setdefault("store", store)
        kwargs.setdefault("rng", ScriptedRandom())
        return SimulationEngine(**kwargs)

    return _make


# FastAPI test client fixtures
@pytest.fixture
def api_engine(make_engine) -> SimulationEngine:
    """Engine for API tests: real catalog, no waiting between steps"""
    return make_engine(step_duration_scale=0)


@pytest.fixture
def app(api_engine: SimulationEngine, store: DeploymentStore) -> FastAPI:
    """Create FastAPI app wired to the test engine and store"""
    from pipeline_simulator.main import create_app

    app = create_app()
    app.dependency_overrides[get_simulation_engine] = lambda: api_engine
    app.dependency_overrides[get_deployment_store] = lambda: store
    return app


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create sync test client; the context keeps the event loop running"""
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
