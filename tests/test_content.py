"""Tests for raw content and pinning endpoints."""

from fastapi.testclient import TestClient


class TestGetContent:
    def test_get_content(self, client: TestClient, store):
        """Content is returned wrapped in JSON."""
        content_id = store.put(b'{"name": "metadata"}')
        response = client.get(f"/content/{content_id}")
        assert response.status_code == 200
        assert response.json() == {"contentId": content_id, "content": '{"name": "metadata"}'}

    def test_invalid_id(self, client: TestClient, store):
        response = client.get("/content/bad!id")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid content identifier format"}
        assert store.calls == []

    def test_missing_content(self, client: TestClient):
        response = client.get("/content/" + "Q" * 46)
        assert response.status_code == 404
        assert "error" in response.json()

    def test_too_large_to_inline(self, client: TestClient, store):
        from seednode.config import get_settings

        content_id = store.put(b"x" * (get_settings().CONTENT_INLINE_MAX_BYTES + 10))
        response = client.get(f"/content/{content_id}")
        assert response.status_code == 400
        assert response.json() == {"error": "Content too large to return inline"}


class TestPinContent:
    def test_pin(self, client: TestClient, store):
        content_id = "Qm" + "a" * 44
        response = client.post(f"/content/{content_id}/pin")
        assert response.status_code == 200
        assert response.json() == {"pinned": True, "contentId": content_id}
        assert content_id in store.pins

    def test_pin_invalid_id(self, client: TestClient, store):
        response = client.post("/content/short/pin")
        assert response.status_code == 400
        assert store.calls == []

    def test_pin_store_failure(self, client: TestClient, store):
        store.fail_pin = True
        response = client.post("/content/" + "Qm" + "b" * 44 + "/pin")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to pin"}
