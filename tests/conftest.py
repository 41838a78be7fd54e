import pytest
from fastapi.testclient import TestClient

from gradebook.api.main import create_app
from gradebook.database.config import DatabaseConfig


@pytest.fixture
def db_session():
    config = DatabaseConfig(database_url="sqlite://", echo=False)
    config.create_tables()
    session = config.get_session()
    try:
        yield session
    finally:
        session.close()
        config.engine.dispose()


@pytest.fixture
def client():
    app = create_app(database_url="sqlite://")
    with TestClient(app) as test_client:
        yield test_client
