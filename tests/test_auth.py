# tests/test_auth.py

"""
Tests for authentication endpoints.
"""

from fastapi.testclient import TestClient
from unittest.mock import patch, Mock


def _auth_user(role_metadata=None, regions=None):
    user = Mock()
    user.id = "auth-user-id"
    user.email = "ann@example.com"
    user.user_metadata = {"name": "Ann", "regions": regions or []}
    user.app_metadata = role_metadata or {}
    return user


def _sign_in_response(user, token="issued-token"):
    session = Mock()
    session.access_token = token
    response = Mock()
    response.session = session
    response.user = user
    return response


def _service_client(users_row=None, users_error=None):
    mock_client = Mock()
    users_query = mock_client.table.return_value.select.return_value.eq.return_value.limit.return_value
    if users_error:
        users_query.execute.side_effect = users_error
    else:
        users_query.execute.return_value = Mock(data=[users_row] if users_row else [])
    return mock_client


# -----------------------------------------------------
# LOGIN
# -----------------------------------------------------
def test_admin_login_success(client: TestClient):
    """Admin login issues a token and the session carries their regions."""
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.return_value = _sign_in_response(
        _auth_user(regions=[{"country": "USA", "name": "California"}])
    )
    service = _service_client({"full_name": "Ann Admin", "role": "admin", "admin_assigned_location": None})

    with patch("routers.auth.get_auth_client", return_value=auth_client), \
            patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/login", json={"email": " Ann@Example.com ", "password": "pw"})

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "issued-token"
    assert data["identity"]["role"] == "admin"
    assert data["identity"]["name"] == "Ann Admin"
    assert data["scope"] == "California, USA"
    assert data["capabilities"]["view_members"] is True
    assert data["capabilities"]["delete_members"] is False

    auth_client.auth.sign_in_with_password.assert_called_once_with(
        {"email": "ann@example.com", "password": "pw"}
    )

    me = client.get("/auth/me", headers={"Authorization": "Bearer issued-token"})
    assert me.status_code == 200
    assert me.json()["identity"]["email"] == "ann@example.com"


def test_admin_regions_fall_back_to_assigned_location(client: TestClient):
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.return_value = _sign_in_response(_auth_user())
    service = _service_client({
        "full_name": "Ann",
        "role": "admin",
        "admin_assigned_location": {"country": "USA", "city": "Austin", "district": "Texas"},
    })

    with patch("routers.auth.get_auth_client", return_value=auth_client), \
            patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/login", json={"email": "ann@example.com", "password": "pw"})

    assert response.status_code == 200
    assert response.json()["scope"] == "Texas, USA"


def test_login_invalid_credentials(client: TestClient):
    """Test login with invalid credentials."""
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

    with patch("routers.auth.get_auth_client", return_value=auth_client):
        response = client.post(
            "/auth/login",
            json={"email": "test@example.com", "password": "wrongpassword"}
        )

    assert response.status_code == 401
    assert "Invalid email or password" in response.json()["detail"]


def test_user_role_is_refused_and_signed_out(client: TestClient, session_storage):
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.return_value = _sign_in_response(_auth_user())
    service = _service_client({"full_name": "Bob", "role": "user"})

    with patch("routers.auth.get_auth_client", return_value=auth_client), \
            patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/login", json={"email": "bob@example.com", "password": "pw"})

    assert response.status_code == 403
    assert "user-level access only" in response.json()["detail"]
    auth_client.auth.sign_out.assert_called_once()
    assert session_storage.size() == 0


def test_missing_role_is_refused(client: TestClient):
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.return_value = _sign_in_response(_auth_user())
    service = _service_client({"full_name": "Nobody", "role": None})

    with patch("routers.auth.get_auth_client", return_value=auth_client), \
            patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/login", json={"email": "x@example.com", "password": "pw"})

    assert response.status_code == 403
    assert "No role assigned" in response.json()["detail"]


def test_role_falls_back_to_app_metadata(client: TestClient):
    """When the users row cannot be read, app_metadata.role decides."""
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.return_value = _sign_in_response(
        _auth_user(role_metadata={"role": "super_admin"})
    )
    service = _service_client(users_error=Exception("relation users does not exist"))

    with patch("routers.auth.get_auth_client", return_value=auth_client), \
            patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/login", json={"email": "ann@example.com", "password": "pw"})

    assert response.status_code == 200
    data = response.json()
    assert data["identity"]["role"] == "super_admin"
    assert data["identity"]["name"] == "Ann"
    assert data["scope"] == "Global Access"


# -----------------------------------------------------
# SESSION: me / logout
# -----------------------------------------------------
def test_me_requires_token(client: TestClient):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.headers.get("www-authenticate") == "Bearer"


def test_unknown_token_is_unauthenticated(client: TestClient):
    response = client.get("/auth/me", headers={"Authorization": "Bearer never-issued"})
    assert response.status_code == 401


def test_logout_is_idempotent(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)

    first = client.post("/auth/logout", headers=headers)
    second = client.post("/auth/logout", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_refresh_picks_up_new_regions(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    service = _service_client({
        "full_name": "CA Admin",
        "role": "admin",
        "admin_assigned_location": {"country": "USA", "district": "Oregon"},
    })
    user = _auth_user()
    user.id = admin_identity.id
    user.email = admin_identity.email
    service.auth.admin.get_user_by_id.return_value = Mock(user=user)

    with patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post("/auth/refresh", headers=headers)

    assert response.status_code == 200
    assert response.json()["scope"] == "Oregon, USA"
    assert client.get("/auth/me", headers=headers).json()["scope"] == "Oregon, USA"


# -----------------------------------------------------
# CHANGE PASSWORD
# -----------------------------------------------------
def test_super_admin_changes_password_without_current(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    service = Mock()
    auth_client = Mock()

    with patch("routers.auth.get_supabase_client", return_value=service), \
            patch("routers.auth.get_auth_client", return_value=auth_client):
        response = client.post(
            "/auth/change-password",
            json={"new_password": "brand-new-pass"},
            headers=headers,
        )

    assert response.status_code == 200
    assert response.json()["current_password_checked"] is False
    service.auth.admin.update_user_by_id.assert_called_once_with(
        super_admin_identity.id, {"password": "brand-new-pass"}
    )
    auth_client.auth.sign_in_with_password.assert_not_called()


def test_admin_needs_current_password(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    service = Mock()

    with patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post(
            "/auth/change-password",
            json={"new_password": "brand-new-pass"},
            headers=headers,
        )

    assert response.status_code == 400
    service.auth.admin.update_user_by_id.assert_not_called()


def test_admin_wrong_current_password(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    service = Mock()
    auth_client = Mock()
    auth_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

    with patch("routers.auth.get_supabase_client", return_value=service), \
            patch("routers.auth.get_auth_client", return_value=auth_client):
        response = client.post(
            "/auth/change-password",
            json={"new_password": "brand-new-pass", "current_password": "wrong"},
            headers=headers,
        )

    assert response.status_code == 400
    assert "incorrect" in response.json()["detail"]
    service.auth.admin.update_user_by_id.assert_not_called()


def test_admin_changes_password_after_reauth(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    service = Mock()
    auth_client = Mock()

    with patch("routers.auth.get_supabase_client", return_value=service), \
            patch("routers.auth.get_auth_client", return_value=auth_client):
        response = client.post(
            "/auth/change-password",
            json={"new_password": "brand-new-pass", "current_password": "old-pass"},
            headers=headers,
        )

    assert response.status_code == 200
    assert response.json()["current_password_checked"] is True
    auth_client.auth.sign_in_with_password.assert_called_once_with(
        {"email": admin_identity.email, "password": "old-pass"}
    )
    service.auth.admin.update_user_by_id.assert_called_once()


def test_password_change_backend_failure_is_502(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    service = Mock()
    service.auth.admin.update_user_by_id.side_effect = Exception("Password should be at least 6 characters")

    with patch("routers.auth.get_supabase_client", return_value=service):
        response = client.post(
            "/auth/change-password",
            json={"new_password": "longenough"},
            headers=headers,
        )

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to change password: Password should be at least 6 characters"
