import os
import sys

import pytest
from fastapi.testclient import TestClient

# Test environment: no metrics, no rate limits, no network simulation
os.environ["APP_ENV"] = "test"

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from projecthub.api.main import create_app
from projecthub.api.services.storage import NetworkSimulation, ProjectStorage


@pytest.fixture
def storage():
    return ProjectStorage(NetworkSimulation.disabled())


@pytest.fixture
def client(storage):
    app = create_app(storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def flaky_storage():
    storage = ProjectStorage(NetworkSimulation(min_delay_ms=0, max_delay_ms=0, failure_rate=1.0))
    storage.seed_sample_data()
    return storage


@pytest.fixture
def flaky_client(flaky_storage):
    app = create_app(flaky_storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def project_payload():
    return {
        "name": "X",
        "description": "d",
        "startDate": "2024-01-01",
        "endDate": "2024-02-01",
        "projectManager": "Y",
    }
