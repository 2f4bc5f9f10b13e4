"""Tests for the wine CRUD routes."""

from datetime import date

from cellar.exceptions import StorageError
from cellar.models.wine import WineColor


def _payload(**overrides) -> dict:
    payload = {
        "name": "Chateau Margaux",
        "vintage": 2015,
        "producer": "Chateau Margaux",
        "country": "France",
        "region": "Bordeaux",
        "color": "RED",
    }
    payload.update(overrides)
    return payload


class TestListWines:
    def test_empty_cellar(self, client):
        response = client.get("/api/wines")
        assert response.status_code == 200
        assert response.json() == []

    def test_lists_existing_wines(self, client, make_wine):
        make_wine(name="First")
        make_wine(name="Second")
        names = {wine["name"] for wine in client.get("/api/wines").json()}
        assert names == {"First", "Second"}


class TestGetWine:
    def test_returns_wine(self, client, make_wine):
        wine = make_wine(color=WineColor.WHITE)
        response = client.get(f"/api/wines/{wine.id}")
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == wine.id
        assert body["color"] == "WHITE"
        assert body["image_url"] is None

    def test_unknown_id(self, client):
        response = client.get("/api/wines/does-not-exist")
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "NOT_FOUND"
        assert body["details"] == {"wine_id": "does-not-exist"}


class TestCreateWine:
    def test_creates_with_defaults(self, client):
        response = client.post("/api/wines", json=_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Chateau Margaux"
        assert body["quantity"] == 1
        assert body["favorite"] is False
        assert body["id"]

        assert client.get(f"/api/wines/{body['id']}").status_code == 200

    def test_strings_are_trimmed(self, client):
        response = client.post("/api/wines", json=_payload(name="  Opus One  "))
        assert response.json()["name"] == "Opus One"

    def test_client_supplied_id_is_ignored(self, client):
        response = client.post("/api/wines", json=_payload(id="chosen-by-client"))
        assert response.status_code == 201
        assert response.json()["id"] != "chosen-by-client"

    def test_optional_fields(self, client):
        response = client.post(
            "/api/wines",
            json=_payload(rating=4.5, wine_link="https://example.com/wine", notes="Cassis", favorite=True),
        )
        body = response.json()
        assert body["rating"] == 4.5
        assert body["wine_link"] == "https://example.com/wine"
        assert body["favorite"] is True

    def test_missing_required_fields(self, client):
        response = client.post("/api/wines", json={"vintage": 2015})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert {"name", "producer", "country", "color"} <= set(body["fields"])

    def test_blank_name_after_trimming(self, client):
        response = client.post("/api/wines", json=_payload(name="   "))
        assert response.status_code == 400
        assert "name" in response.json()["fields"]

    def test_future_vintage(self, client):
        response = client.post("/api/wines", json=_payload(vintage=date.today().year + 1))
        assert response.status_code == 400
        assert "vintage" in response.json()["fields"]

    def test_vintage_before_1900(self, client):
        response = client.post("/api/wines", json=_payload(vintage=1899))
        assert "vintage" in response.json()["fields"]

    def test_rating_must_use_tenth_steps(self, client):
        response = client.post("/api/wines", json=_payload(rating=4.25))
        assert response.status_code == 400
        assert "rating" in response.json()["fields"]

    def test_rating_range(self, client):
        response = client.post("/api/wines", json=_payload(rating=5.5))
        assert "rating" in response.json()["fields"]

    def test_unknown_color(self, client):
        response = client.post("/api/wines", json=_payload(color="BLUE"))
        assert "color" in response.json()["fields"]

    def test_wine_link_must_be_http(self, client):
        response = client.post("/api/wines", json=_payload(wine_link="not a url"))
        assert "wine_link" in response.json()["fields"]

    def test_error_carries_request_id(self, client):
        response = client.post("/api/wines", json={}, headers={"X-Request-ID": "req-123"})
        assert response.json()["request_id"] == "req-123"


class TestUpdateWine:
    def test_partial_update(self, client, make_wine):
        wine = make_wine(quantity=3)
        response = client.put(f"/api/wines/{wine.id}", json={"quantity": 2, "favorite": True})
        assert response.status_code == 200
        body = response.json()
        assert body["quantity"] == 2
        assert body["favorite"] is True
        assert body["name"] == "Test Wine"

    def test_optional_field_can_be_cleared(self, client, make_wine):
        wine = make_wine(notes="Decant first")
        response = client.put(f"/api/wines/{wine.id}", json={"notes": None})
        assert response.json()["notes"] is None

    def test_required_field_cannot_be_nulled(self, client, make_wine):
        wine = make_wine()
        response = client.put(f"/api/wines/{wine.id}", json={"name": None})
        assert response.status_code == 400
        assert "name" in response.json()["fields"]

    def test_unknown_field_is_rejected(self, client, make_wine):
        wine = make_wine()
        response = client.put(f"/api/wines/{wine.id}", json={"cellar_slot": "B4"})
        assert response.status_code == 400
        assert "cellar_slot" in response.json()["fields"]

    def test_unknown_id(self, client):
        response = client.put("/api/wines/missing", json={"quantity": 2})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestDeleteWine:
    def test_deletes_record(self, client, make_wine):
        wine = make_wine()
        response = client.delete(f"/api/wines/{wine.id}")
        assert response.status_code == 204
        assert client.get(f"/api/wines/{wine.id}").status_code == 404

    def test_unknown_id(self, client):
        assert client.delete("/api/wines/missing").status_code == 404

    def test_also_removes_label_image(self, client, make_wine, uploads, jpeg_bytes):
        wine = make_wine()
        client.post(f"/api/wines/{wine.id}/image", files={"image": ("label.jpg", jpeg_bytes, "image/jpeg")})
        assert uploads.exists(wine.id)

        client.delete(f"/api/wines/{wine.id}")

        assert not uploads.exists(wine.id)

    def test_storage_failure_keeps_record_for_retry(self, client, make_wine, uploads, jpeg_bytes, monkeypatch):
        wine = make_wine()
        client.post(f"/api/wines/{wine.id}/image", files={"image": ("label.jpg", jpeg_bytes, "image/jpeg")})

        def _fail(owner_id):
            raise StorageError("delete", PermissionError("busy"))

        monkeypatch.setattr(uploads, "delete", _fail)
        response = client.delete(f"/api/wines/{wine.id}")

        assert response.status_code == 500
        assert response.json()["code"] == "STORAGE_ERROR"
        assert client.get(f"/api/wines/{wine.id}").status_code == 200
        assert uploads.exists(wine.id)

        monkeypatch.undo()
        assert client.delete(f"/api/wines/{wine.id}").status_code == 204
        assert not uploads.exists(wine.id)
