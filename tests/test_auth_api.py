from taskboard.security.password import hash_password, verify_password

from conftest import PASSWORD


def _register(client, username="dana", email="Dana@Example.com", password="s3cret-pass"):
    return client.post("/api/auth/register", json={"username": username, "email": email, "password": password})


def test_register_then_use_token(client):
    resp = _register(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["username"] == "dana"
    assert body["user"]["email"] == "dana@example.com"
    assert body["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json() == body["user"]

    todos = client.get("/api/todos", headers={"Authorization": f"Bearer {body['token']}"})
    assert todos.json() == {"todos": []}


def test_register_conflicts(client):
    assert _register(client).status_code == 201

    resp = _register(client, email="other@example.com")
    assert resp.status_code == 409
    assert resp.json() == {"message": "Username already exists"}

    resp = _register(client, username="dana2", email="DANA@example.com")
    assert resp.status_code == 409
    assert resp.json() == {"message": "Email already registered"}


def test_register_validation(client):
    assert _register(client, password="short").status_code == 400
    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, username="ab").status_code == 400


def test_login_by_username_or_email(client, alice):
    resp = client.post("/api/auth/login", json={"username": "alice", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == alice.id

    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD})
    assert resp.status_code == 200


def test_login_failures(client, alice):
    resp = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}

    resp = client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert resp.status_code == 401

    resp = client.post("/api/auth/login", json={"password": PASSWORD})
    assert resp.status_code == 400


def test_password_hashing_round_trip():
    hashed = hash_password("correct horse")
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("correct horse", "garbage")
