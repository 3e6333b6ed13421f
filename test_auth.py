from conftest import auth_headers, make_user


def register(client, **overrides):
    payload = {
        "username": "newstudent",
        "password": "secret123",
        "email": "new@student.com",
        "name": "طالب جديد",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_returns_user_and_token(client):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["username"] == "newstudent"
    assert body["user"]["role"] == "student"
    assert "password" not in body["user"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


def test_register_ignores_requested_role(client):
    response = register(client, role="admin", xp=99999)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "student"
    assert user["xp"] == 0
    assert user["level"] == 1


def test_register_duplicate_username(client):
    assert register(client).status_code == 201
    response = register(client, email="other@student.com")
    assert response.status_code == 400
    assert response.json()["error"] == "اسم المستخدم موجود بالفعل"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    response = register(client, username="someoneelse")
    assert response.status_code == 400


def test_register_validation_errors(client):
    response = register(client, password="123", email="not-an-email")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "بيانات غير صالحة"
    fields = {tuple(d["loc"])[-1] for d in body["details"]}
    assert {"password", "email"} <= fields


def test_login(client, db):
    make_user(db, "mohammad", password="student123")
    response = client.post("/api/auth/login", json={"username": "mohammad", "password": "student123"})
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "mohammad"


def test_login_wrong_password(client, db):
    make_user(db, "mohammad", password="student123")
    response = client.post("/api/auth/login", json={"username": "mohammad", "password": "wrongpass"})
    assert response.status_code == 401
    assert "error" in response.json()


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
    assert response.status_code == 401


def test_login_inactive_account(client, db):
    make_user(db, "disabled", password="secret123", is_active=False)
    response = client.post("/api/auth/login", json={"username": "disabled", "password": "secret123"})
    assert response.status_code == 403


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_forged_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401


def test_token_for_deleted_user(client, db):
    user = make_user(db, "temporary")
    headers = auth_headers(user)
    db.delete(user)
    db.commit()
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_admin_endpoints_enforced_on_server(client, student_headers, instructor_headers, admin_headers):
    assert client.get("/api/admin/stats", headers=student_headers).status_code == 403
    assert client.get("/api/admin/stats", headers=instructor_headers).status_code == 403
    assert client.get("/api/admin/stats", headers=admin_headers).status_code == 200


def test_client_asserted_user_id_is_ignored(client, student, admin):
    response = client.get("/api/admin/stats", headers={"X-User-Id": admin.id})
    assert response.status_code == 401
