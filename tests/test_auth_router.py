from datetime import datetime, timedelta

from model.otp_model import OTP


def login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_login_and_me(client, employee):
    response = login(client, employee.email, "password123")

    assert response.status_code == 200
    token = response.json()["token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == employee.email
    assert me.json()["role"] == "EMPLOYEE"


def test_login_with_wrong_password(client, employee):
    assert login(client, employee.email, "wrong").status_code == 401
    assert login(client, "nobody@example.com", "password123").status_code == 401


def test_otp_flow(client, db_session, employee, notifier):
    assert client.post("/auth/otp/send", json={"email": employee.email}).status_code == 200
    assert client.post("/auth/otp/send", json={"email": employee.email}).status_code == 200

    codes = [m["code"] for m in notifier.sent if m["kind"] == "otp"]
    assert db_session.query(OTP).count() == 1
    assert db_session.query(OTP).one().code == codes[-1]

    response = client.post("/auth/otp/verify", json={"email": employee.email, "otp": codes[-1]})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == employee.id
    assert db_session.query(OTP).count() == 0

    again = client.post("/auth/otp/verify", json={"email": employee.email, "otp": codes[-1]})
    assert again.status_code == 401


def test_otp_for_unknown_email(client):
    assert client.post("/auth/otp/send", json={"email": "ghost@example.com"}).status_code == 404


def test_expired_otp_is_rejected(client, db_session, employee):
    db_session.add(OTP(email=employee.email, code="123456", expires_at=datetime.utcnow() - timedelta(minutes=1)))
    db_session.commit()

    response = client.post("/auth/otp/verify", json={"email": employee.email, "otp": "123456"})
    assert response.status_code == 401


def test_reset_password(client, employee, notifier):
    client.post("/auth/otp/send", json={"email": employee.email})
    code = notifier.sent[-1]["code"]

    response = client.post("/auth/reset-password",
                           json={"email": employee.email, "otp": code, "new_password": "brand-new-pass"})

    assert response.status_code == 200
    assert login(client, employee.email, "password123").status_code == 401
    assert login(client, employee.email, "brand-new-pass").status_code == 200


def test_manager_creates_and_offboards_users(client, manager_headers, employee_headers, notifier):
    response = client.post("/users/manage", json={"name": "Carol", "email": "carol@example.com"},
                           headers=manager_headers)
    assert response.status_code == 201
    user = response.json()
    assert user["role"] == "EMPLOYEE"

    welcome = notifier.sent[-1]
    assert welcome["kind"] == "welcome"
    assert login(client, "carol@example.com", welcome["password"]).status_code == 200

    duplicate = client.post("/users/manage", json={"name": "Carol", "email": "carol@example.com"},
                            headers=manager_headers)
    assert duplicate.status_code == 400

    patched = client.patch("/users/manage", json={"user_id": user["id"], "end_date": "2025-06-20T15:00:00Z"},
                           headers=manager_headers)
    assert patched.json()["end_date"] == "2025-06-20"

    cleared = client.patch("/users/manage", json={"user_id": user["id"], "end_date": ""}, headers=manager_headers)
    assert cleared.json()["end_date"] is None

    assert client.get("/users/manage", headers=employee_headers).status_code == 403
    assert client.patch("/users/manage", json={"user_id": 999}, headers=manager_headers).status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
