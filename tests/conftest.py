import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from fastapi.testclient import TestClient

from src.backend.app import create_app
from src.backend.config import Settings
from src.backend.utils.media import PhotoStore


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATA_FILE=str(tmp_path / 'data' / 'employees.json'),
        UPLOAD_DIR=str(tmp_path / 'uploads'),
        UPLOAD_URL='/uploads',
        LOG_LEVEL='DEBUG',
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def photo_store(app) -> PhotoStore:
    return app.state.photo_store


@pytest.fixture
def ada():
    return {'id': 'E1', 'name': 'Ada', 'mobile': '5551234567', 'address': '1 Main St'}
