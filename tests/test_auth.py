import time
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from jose import jwt

from taskhub.core.config import Settings
from taskhub.core.security import authenticate, create_access_token, hash_password, check_password
from taskhub.main import create_app


def test_register_success(client):
    """Test : créer un utilisateur avec succès"""
    response = client.post("/api/register", json={
        "name": "Carol",
        "email": "carol@example.com",
        "password": "password123"
    })
    assert response.status_code == 201
    assert response.json() == {"message": "User created successfully"}


def test_register_duplicate_email(client):
    """Test : impossible de créer 2 users avec le même email"""
    client.post("/api/register", json={"name": "A", "email": "dup@example.com", "password": "one"})

    # même erreur quel que soit le password, même invalide
    for password in ["one", "another-password", "x", "", "p" * 80]:
        response = client.post("/api/register", json={
            "name": "B",
            "email": "dup@example.com",
            "password": password
        })
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"


def test_register_missing_field(client):
    response = client.post("/api/register", json={"email": "nobody@example.com", "password": "x"})
    assert response.status_code == 400
    assert "name" in response.json()["message"]


def test_login_success(client):
    """Test : se connecter avec succès"""
    client.post("/api/register", json={"name": "Dan", "email": "dan@example.com", "password": "secret"})
    response = client.post("/api/login", json={"email": "dan@example.com", "password": "secret"})
    assert response.status_code == 200
    data = response.json()
    assert "token" in data
    assert data["user"]["name"] == "Dan"
    assert data["user"]["email"] == "dan@example.com"
    assert isinstance(data["user"]["id"], int)


def test_login_failures_are_indistinguishable(client):
    """Test : mauvais password et email inconnu donnent la même réponse"""
    client.post("/api/register", json={"name": "Eve", "email": "eve@example.com", "password": "correct"})

    wrong_password = client.post("/api/login", json={"email": "eve@example.com", "password": "wrong"})
    unknown_email = client.post("/api/login", json={"email": "ghost@example.com", "password": "correct"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid credentials"}


def test_token_claims(client, alice, test_settings):
    payload = jwt.decode(alice["token"], test_settings.JWT_SECRET, algorithms=["HS256"])
    assert payload["userId"] == alice["user"]["id"]
    assert payload["email"] == "alice@example.com"
    assert payload["name"] == "Alice"
    # expiration à 24h
    expires_in = payload["exp"] - time.time()
    assert timedelta(hours=23) < timedelta(seconds=expires_in) <= timedelta(hours=24, minutes=1)


def test_password_never_stored_in_clear(client, db):
    from taskhub.models.user import User

    client.post("/api/register", json={"name": "Fay", "email": "fay@example.com", "password": "hunter2"})
    user = db.query(User).filter(User.email == "fay@example.com").first()
    assert user.password_hash != "hunter2"
    assert user.verify_password("hunter2")
    assert not user.verify_password("hunter3")


def test_hash_uses_cost_factor():
    hashed = hash_password("pw", rounds=10)
    assert hashed.startswith("$2b$10$")
    assert check_password("pw", hashed)


def test_missing_token_is_401(client):
    response = client.get("/api/tasks")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"


def test_invalid_token_is_403(client):
    response = client.get("/api/tasks", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403
    assert response.json()["message"] == "Invalid token"


def test_expired_token_is_rejected(client, alice, test_settings):
    expired = jwt.encode(
        {
            "userId": alice["user"]["id"],
            "email": "alice@example.com",
            "name": "Alice",
            "exp": datetime.utcnow() - timedelta(minutes=1),
        },
        test_settings.JWT_SECRET,
        algorithm="HS256",
    )
    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 403


def test_token_signed_with_other_secret_is_rejected(test_settings):
    forged = jwt.encode({"userId": 1, "email": "a@b.c", "name": "A"}, "other-secret", algorithm="HS256")
    assert authenticate(forged, test_settings) is None


def test_authenticate_returns_identity(test_settings):
    token = create_access_token(7, "seven@example.com", "Seven", test_settings)
    identity = authenticate(token, test_settings)
    assert identity.user_id == 7
    assert identity.email == "seven@example.com"
    assert identity.name == "Seven"


def test_list_users(client, alice, bob):
    response = client.get("/api/users", headers=alice["headers"])
    assert response.status_code == 200
    users = response.json()
    assert [u["name"] for u in users] == ["Alice", "Bob"]
    assert set(users[0].keys()) == {"_id", "name", "email"}


def test_health_z(client):
    """Test : l'endpoint health fonctionne"""
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_register_empty_password(client):
    response = client.post("/api/register", json={"name": "G", "email": "g@example.com", "password": ""})
    assert response.status_code == 400
    assert response.json()["message"] == "Password is required"


def test_register_password_over_72_bytes(client):
    response = client.post("/api/register", json={"name": "H", "email": "h@example.com", "password": "p" * 80})
    assert response.status_code == 400
    assert response.json()["message"] == "Password cannot be longer than 72 bytes"


def test_login_long_password_does_not_reveal_email(client):
    """Password > 72 octets: même réponse pour un email connu ou inconnu"""
    client.post("/api/register", json={"name": "Ivy", "email": "ivy@example.com", "password": "short"})

    known = client.post("/api/login", json={"email": "ivy@example.com", "password": "p" * 80})
    unknown = client.post("/api/login", json={"email": "ghost@example.com", "password": "p" * 80})

    assert known.status_code == unknown.status_code == 400
    assert known.json() == unknown.json() == {"message": "Invalid credentials"}


def test_check_password_too_long_is_false():
    hashed = hash_password("pw", rounds=4)
    assert check_password("p" * 80, hashed) is False


def test_create_app_uses_given_settings(tmp_path):
    app_settings = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'factory.db'}",
        UPLOAD_DIR=str(tmp_path / "files"),
        JWT_SECRET="factory-secret",
        JWT_EXPIRE_HOURS=2,
        BCRYPT_ROUNDS=5,
    )
    with TestClient(create_app(app_settings)) as factory_client:
        factory_client.post("/api/register", json={"name": "Kim", "email": "kim@example.com", "password": "pw"})
        token = factory_client.post("/api/login", json={"email": "kim@example.com", "password": "pw"}).json()["token"]

        payload = jwt.decode(token, "factory-secret", algorithms=["HS256"])
        assert payload["email"] == "kim@example.com"
        assert payload["exp"] - time.time() <= 2 * 3600 + 60

        response = factory_client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

        from taskhub.models.user import User
        session = factory_client.app.state.db.SessionLocal()
        user = session.query(User).filter(User.email == "kim@example.com").first()
        session.close()
        assert user.password_hash.startswith("$2b$05$")
