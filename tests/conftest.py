import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from taskhub.core.config import Settings
from taskhub.main import create_app


@pytest.fixture
def test_settings(tmp_path):
    """Base SQLite + dossier d'upload isolés pour chaque test"""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,  # hash rapide en test
        CLEAR_COMPLETION_ON_REOPEN=False,
    )


@pytest.fixture
def client(test_settings):
    """Client de test FastAPI (lifespan exécuté: DB ouverte puis fermée)"""
    with TestClient(create_app(test_settings)) as c:
        yield c


@pytest.fixture
def db(client):
    """Session DB pour les tests"""
    session = client.app.state.db.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def upload_dir(test_settings):
    return Path(test_settings.UPLOAD_DIR)


def register_and_login(client, name, email, password="pass123"):
    client.post("/api/register", json={"name": name, "email": email, "password": password})
    response = client.post("/api/login", json={"email": email, "password": password})
    data = response.json()
    return data["token"], data["user"]


@pytest.fixture
def alice(client):
    token, user = register_and_login(client, "Alice", "alice@example.com")
    return {"token": token, "user": user, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def bob(client):
    token, user = register_and_login(client, "Bob", "bob@example.com")
    return {"token": token, "user": user, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def make_task(client, alice, bob):
    """Crée une tâche via l'API (créée par Alice, assignée à Bob par défaut)"""
    def _make(**overrides):
        payload = {
            "title": "Prepare release notes",
            "description": "Collect changes for the next version",
            "category": "Technical",
            "dueDate": "2099-01-01T00:00:00",
            "assignedTo": bob["user"]["id"],
        }
        payload.update(overrides)
        response = client.post("/api/tasks", headers=alice["headers"], json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _make
