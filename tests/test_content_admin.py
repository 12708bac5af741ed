# tests/test_content_admin.py

"""
Tests for featured sellers, cover images and admin region management.
"""

from fastapi.testclient import TestClient
from unittest.mock import patch, Mock

from routers.cover_images import storage_path_for, storage_path_from_url


def _query(rows):
    query = Mock()
    for method in ("select", "eq", "in_", "order", "limit", "update", "delete", "insert"):
        getattr(query, method).return_value = query
    query.execute.return_value = Mock(data=rows)
    return query


# -----------------------------------------------------
# FEATURED SELLERS
# -----------------------------------------------------
def test_admin_lists_featured_sellers_in_region(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    mock_client = Mock()
    mock_client.table.return_value = _query([
        {"user_id": "s-ca", "priority": 5, "country": "USA", "state": "California"},
        {"user_id": "s-tx", "priority": 9, "country": "USA", "state": "Texas"},
    ])

    with patch("routers.featured_sellers.get_supabase_client", return_value=mock_client):
        response = client.get("/featured-sellers", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert [row["user_id"] for row in data["rows"]] == ["s-ca"]
    assert data["actions"] == {"manage_featured_sellers": False}
    mock_client.table.assert_called_with("featured_sellers_with_details")


def test_toggle_featured_seller_calls_rpc(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client = Mock()
    mock_client.rpc.return_value.execute.return_value = Mock(
        data={"success": True, "action": "featured", "message": "Seller featured"}
    )

    with patch("routers.featured_sellers.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/featured-sellers/toggle",
            json={"user_id": "s-ca", "notes": "Great produce"},
            headers=headers,
        )

    assert response.status_code == 200
    assert response.json()["action"] == "featured"
    mock_client.rpc.assert_called_once_with(
        "toggle_featured_seller",
        {"p_user_id": "s-ca", "p_admin_id": super_admin_identity.id, "p_notes": "Great produce"},
    )


def test_admin_cannot_toggle_featured_seller(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    mock_client = Mock()

    with patch("routers.featured_sellers.get_supabase_client", return_value=mock_client):
        response = client.post("/featured-sellers/toggle", json={"user_id": "s-ca"}, headers=headers)

    assert response.status_code == 403
    mock_client.rpc.assert_not_called()


def test_update_priority(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    query = _query([{"user_id": "s-ca", "priority": 3}])
    mock_client = Mock()
    mock_client.table.return_value = query

    with patch("routers.featured_sellers.get_supabase_client", return_value=mock_client):
        response = client.put("/featured-sellers/s-ca/priority", json={"priority": 3}, headers=headers)

    assert response.status_code == 200
    assert query.update.call_args[0][0]["priority"] == 3
    query.eq.assert_any_call("user_id", "s-ca")


# -----------------------------------------------------
# COVER IMAGES
# -----------------------------------------------------
def test_storage_paths():
    path = storage_path_for("my hero.png")
    assert path.startswith("cover-images/")
    assert path.endswith("-my_hero.png")
    assert storage_path_from_url(
        "https://x.supabase.co/storage/v1/object/public/cover-images/cover-images/123-a.png"
    ) == "cover-images/123-a.png"


def test_active_cover_image_is_public(client: TestClient):
    mock_client = Mock()
    mock_client.table.return_value = _query([{"id": "c-1", "is_active": True}])

    with patch("routers.cover_images.get_supabase_client", return_value=mock_client):
        response = client.get("/cover-images/active")

    assert response.status_code == 200
    assert response.json()["image"]["id"] == "c-1"


def test_admin_cannot_upload_cover_image(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)
    mock_client = Mock()

    with patch("routers.cover_images.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/cover-images",
            files={"file": ("hero.png", b"\x89PNG", "image/png")},
            headers=headers,
        )

    assert response.status_code == 403
    mock_client.storage.from_.assert_not_called()


def test_upload_saves_new_active_image(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    query = _query([{"id": "c-new", "is_active": True}])
    mock_client = Mock()
    mock_client.table.return_value = query
    bucket = mock_client.storage.from_.return_value
    bucket.get_public_url.return_value = "https://cdn/cover-images/123-hero.png"

    with patch("routers.cover_images.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/cover-images",
            files={"file": ("hero.png", b"\x89PNG", "image/png")},
            data={"name": "Spring"},
            headers=headers,
        )

    assert response.status_code == 200
    mock_client.storage.from_.assert_called_with("cover-images")
    assert bucket.upload.call_args.kwargs["path"].startswith("cover-images/")
    assert bucket.upload.call_args.kwargs["file"] == b"\x89PNG"

    # previous active image deactivated before the insert
    query.update.assert_any_call({"is_active": False})
    inserted = query.insert.call_args_list[0][0][0]
    assert inserted["name"] == "Spring"
    assert inserted["is_active"] is True
    assert inserted["created_by"] == super_admin_identity.id


def test_upload_rejects_non_images(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)

    response = client.post(
        "/cover-images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )

    assert response.status_code == 400


def test_delete_continues_when_storage_removal_fails(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    query = _query([{"id": "c-1", "image_url": "https://cdn/cover-images/123-hero.png"}])
    mock_client = Mock()
    mock_client.table.return_value = query
    mock_client.storage.from_.return_value.remove.side_effect = Exception("object not found")

    with patch("routers.cover_images.get_supabase_client", return_value=mock_client):
        response = client.delete("/cover-images/c-1", headers=headers)

    assert response.status_code == 200
    mock_client.storage.from_.return_value.remove.assert_called_once_with(["cover-images/123-hero.png"])
    query.delete.assert_called_once()


# -----------------------------------------------------
# ADMIN MANAGEMENT
# -----------------------------------------------------
def test_admin_management_is_super_admin_only(client: TestClient, login_as, admin_identity):
    headers = login_as(admin_identity)

    with patch("routers.admins.get_supabase_client") as mock_supabase:
        response = client.get("/admins", headers=headers)

    assert response.status_code == 403
    mock_supabase.assert_not_called()


def test_list_admins_with_regions(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client = Mock()
    mock_client.table.return_value = _query([
        {
            "id": "a-1",
            "full_name": "CA Admin",
            "email": "ca@example.com",
            "role": "admin",
            "admin_assigned_location": {"country": "USA", "district": "California"},
        },
    ])

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.get("/admins", headers=headers)

    assert response.status_code == 200
    admin = response.json()["admins"][0]
    assert admin["role_label"] == "Admin"
    assert admin["regions"] == [{"country": "USA", "name": "California"}]


def _admin_target_client(target):
    query = _query([target] if target else [])
    mock_client = Mock()
    mock_client.table.return_value = query
    return mock_client, query


def test_assign_regions_updates_row_and_metadata(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client(
        {"id": "a-1", "role": "admin", "admin_assigned_location": None}
    )
    regions = [{"country": "USA", "name": "Oregon"}, {"country": "USA", "name": "Nevada"}]

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.put("/admins/a-1/regions", json={"regions": regions}, headers=headers)

    assert response.status_code == 200
    query.update.assert_called_once_with({
        "admin_assigned_location": {"country": "USA", "city": None, "district": "Oregon"},
    })
    mock_client.auth.admin.update_user_by_id.assert_called_once_with(
        "a-1", {"user_metadata": {"regions": regions}}
    )


def test_assign_regions_never_touches_a_super_admin(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client(
        {"id": super_admin_identity.id, "role": "super_admin", "admin_assigned_location": None}
    )

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.put(
            f"/admins/{super_admin_identity.id}/regions",
            json={"regions": [{"country": "USA", "name": "California"}]},
            headers=headers,
        )

    assert response.status_code == 400
    query.update.assert_not_called()
    mock_client.auth.admin.update_user_by_id.assert_not_called()


def test_assign_regions_does_not_promote_a_user(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client({"id": "u-1", "role": "user"})

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.put(
            "/admins/u-1/regions",
            json={"regions": [{"country": "USA", "name": "Oregon"}]},
            headers=headers,
        )

    assert response.status_code == 400
    query.update.assert_not_called()


def test_assign_regions_to_missing_user_is_404(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client(None)

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.put("/admins/ghost/regions", json={"regions": []}, headers=headers)

    assert response.status_code == 404
    query.update.assert_not_called()


def test_failed_metadata_update_restores_the_row(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    old_location = {"country": "USA", "city": None, "district": "Texas"}
    mock_client, query = _admin_target_client(
        {"id": "a-1", "role": "admin", "admin_assigned_location": old_location}
    )
    mock_client.auth.admin.update_user_by_id.side_effect = Exception("auth service down")

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.put(
            "/admins/a-1/regions",
            json={"regions": [{"country": "USA", "name": "Oregon"}]},
            headers=headers,
        )

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to assign regions: auth service down"
    updates = [c.args[0] for c in query.update.call_args_list]
    assert updates == [
        {"admin_assigned_location": {"country": "USA", "city": None, "district": "Oregon"}},
        {"admin_assigned_location": old_location},
    ]


def test_failed_promotion_restores_role(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client(
        {"id": "u-1", "role": "user", "admin_assigned_location": None}
    )
    mock_client.auth.admin.update_user_by_id.side_effect = Exception("auth service down")

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/admins/u-1/promote",
            json={"regions": [{"country": "USA", "name": "Oregon"}]},
            headers=headers,
        )

    assert response.status_code == 502
    query.update.assert_called_with({"admin_assigned_location": None, "role": "user"})


def test_promote_requires_a_region(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)

    response = client.post("/admins/u-1/promote", json={"regions": []}, headers=headers)

    assert response.status_code == 400


def test_promote_user_with_regions(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client({"id": "u-1", "role": "user"})

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/admins/u-1/promote",
            json={"regions": [{"country": "USA", "name": "Oregon"}]},
            headers=headers,
        )

    assert response.status_code == 200
    query.update.assert_called_once_with({
        "admin_assigned_location": {"country": "USA", "city": None, "district": "Oregon"},
        "role": "admin",
    })


def test_cannot_promote_a_super_admin(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client({"id": "s-2", "role": "super_admin"})

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.post(
            "/admins/s-2/promote",
            json={"regions": [{"country": "USA", "name": "Oregon"}]},
            headers=headers,
        )

    assert response.status_code == 400
    query.update.assert_not_called()


def test_demote_clears_regions(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client(
        {"id": "a-1", "role": "admin", "admin_assigned_location": {"country": "USA", "district": "Oregon"}}
    )

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.post("/admins/a-1/demote", headers=headers)

    assert response.status_code == 200
    query.update.assert_called_once_with({"role": "user", "admin_assigned_location": None})
    mock_client.auth.admin.update_user_by_id.assert_called_once_with(
        "a-1", {"user_metadata": {"regions": []}}
    )


def test_cannot_demote_a_super_admin(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)
    mock_client, query = _admin_target_client({"id": "s-2", "role": "super_admin"})

    with patch("routers.admins.get_supabase_client", return_value=mock_client):
        response = client.post("/admins/s-2/demote", headers=headers)

    assert response.status_code == 400
    query.update.assert_not_called()


def test_cannot_demote_self(client: TestClient, login_as, super_admin_identity):
    headers = login_as(super_admin_identity)

    response = client.post(f"/admins/{super_admin_identity.id}/demote", headers=headers)

    assert response.status_code == 400


# -----------------------------------------------------
# HEALTH
# -----------------------------------------------------
def test_health_app(client: TestClient):
    response = client.get("/health/app")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db_not_configured(client: TestClient):
    with patch("routers.health.ping_supabase", return_value={"service": "Supabase", "status": "not_configured"}):
        response = client.get("/health/db")

    assert response.status_code == 200
    assert response.json()["status"] == "not_configured"


def test_health_db_degraded_when_a_table_fails(client: TestClient):
    mock_client = Mock()

    def table(name):
        query = _query([])
        if name == "audit_logs":
            query.execute.side_effect = Exception('relation "audit_logs" does not exist')
        return query

    mock_client.table.side_effect = table

    with patch("core.supabase_client.get_supabase_client", return_value=mock_client):
        response = client.get("/health/db")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["failed_tables"] == ["audit_logs"]
    assert data["tables"]["users"] == "ok"
