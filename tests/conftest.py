from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from database import open_engine, create_db_and_tables
from main import create_app
from store import TaskStore


@pytest.fixture()
def store() -> Iterator[TaskStore]:
    """TaskStore over a fresh in-memory SQLite database"""
    engine = open_engine("sqlite://", echo=False)
    create_db_and_tables(engine)
    task_store = TaskStore(engine)
    yield task_store
    task_store.close()


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """App client; entering the context runs the startup/shutdown events"""
    app = create_app("sqlite://")
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def broken_storage(client: TestClient) -> TestClient:
    """Client whose tasks table has been dropped, so every query fails"""
    SQLModel.metadata.drop_all(client.app.state.store.engine)
    return client
