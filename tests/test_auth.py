def test_login_and_me(client, customer):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": customer.email, "password": "secret123"},
    )

    assert response.status_code == 200
    tokens = response.get_json()["data"]
    assert tokens["type"] == "Bearer"
    assert tokens["user"]["role"] == "customer"

    me = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )
    assert me.get_json()["data"]["email"] == customer.email


def test_wrong_password_is_unauthorized(client, customer):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": customer.email, "password": "wrong"},
    )

    assert response.status_code == 401
    assert response.get_json()["data"]["error"] == "UNAUTHORIZED"


def test_missing_credentials_are_bad_request(client):
    response = client.post("/api/v1/auth/login", json={"email": "a@b.c"})

    assert response.status_code == 400
    assert response.get_json()["data"]["field"] == "password"


def test_refresh_token_issues_new_access_token(client, customer):
    tokens = client.post(
        "/api/v1/auth/login",
        json={"email": customer.email, "password": "secret123"},
    ).get_json()["data"]

    refreshed = client.post(
        "/api/v1/auth/refresh-token",
        headers={"Authorization": f"Bearer {tokens['refresh_token']}"},
    )
    with_access = client.post(
        "/api/v1/auth/refresh-token",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )

    assert refreshed.status_code == 200
    assert refreshed.get_json()["data"]["access_token"]
    assert with_access.status_code == 401


def test_invalid_token_is_unauthorized(client):
    response = client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401
