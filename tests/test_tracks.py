"""Tests for track creation, listing, and deletion."""

import io

from fastapi.testclient import TestClient


class TestTrackCreate:
    """Tests for creating tracks."""

    def test_create_track(self, client: TestClient):
        """Create a track with title and artist."""
        response = client.post("/tracks", json={"title": "Demo", "artistName": "Alice"})
        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["title"] == "Demo"
        assert data["artistName"] == "Alice"
        assert data["contentId"] is None
        assert data["mimeType"] is None
        assert data["fileSizeBytes"] is None
        assert data["durationSeconds"] is None

    def test_create_then_get(self, client: TestClient, make_track):
        """A new track has no content and an empty version history."""
        track = make_track()
        response = client.get(f"/tracks/{track['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["contentId"] is None
        assert data["versions"] == []

    def test_create_missing_artist(self, client: TestClient):
        """Missing artistName is rejected."""
        response = client.post("/tracks", json={"title": "Demo"})
        assert response.status_code == 400
        assert response.json() == {"error": "title and artistName are required"}

    def test_create_blank_title(self, client: TestClient):
        """Whitespace-only title is rejected."""
        response = client.post("/tracks", json={"title": "   ", "artistName": "Alice"})
        assert response.status_code == 400
        assert response.json()["error"] == "title and artistName are required"

    def test_create_malformed_body(self, client: TestClient):
        """A non-JSON body is a 400, not a 422."""
        response = client.post("/tracks", content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert "error" in response.json()


class TestTrackList:
    """Tests for listing tracks."""

    def test_list_empty(self, client: TestClient):
        response = client.get("/tracks")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first_with_version_count(self, client: TestClient, make_track):
        """Tracks come back newest first, each with a version count."""
        first = make_track(title="First")
        second = make_track(title="Second")
        client.post(
            f"/tracks/{first['id']}/upload",
            files={"audio": ("a.mp3", io.BytesIO(b"\x01" * 64), "audio/mpeg")},
        )

        response = client.get("/tracks")
        assert response.status_code == 200
        data = response.json()
        assert [t["id"] for t in data] == [second["id"], first["id"]]
        assert data[0]["versionCount"] == 0
        assert data[1]["versionCount"] == 1

    def test_playable_view_excludes_tracks_without_content(self, client: TestClient, make_track):
        """Tracks without a content identifier are not playable."""
        silent = make_track(title="Silent")
        playable = make_track(title="Playable")
        client.post(
            f"/tracks/{playable['id']}/upload",
            files={"audio": ("a.mp3", io.BytesIO(b"\x02" * 64), "audio/mpeg")},
        )

        response = client.get("/tracks", params={"playable": "true"})
        ids = [t["id"] for t in response.json()]
        assert ids == [playable["id"]]
        assert silent["id"] not in ids


class TestTrackGet:
    def test_get_nonexistent(self, client: TestClient):
        response = client.get("/tracks/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Track not found"}


class TestTrackDelete:
    """Tests for deleting tracks."""

    def test_delete_unknown_track(self, client: TestClient, store):
        """Deleting an unknown id is a 404 with no side effects."""
        response = client.delete("/tracks/unknown-id")
        assert response.status_code == 404
        assert response.json() == {"error": "Track not found"}
        assert store.calls == []

    def test_delete_track_without_content_does_not_unpin(self, client: TestClient, make_track, store):
        track = make_track()
        response = client.delete(f"/tracks/{track['id']}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert store.unpinned == []
        assert client.get(f"/tracks/{track['id']}").status_code == 404

    def test_delete_track_unpins_content_and_drops_versions(self, client: TestClient, make_track, store, db_session):
        """Deleting a track unpins its current content and cascades its versions."""
        from seednode.models.version import Version

        track = make_track()
        upload = client.post(
            f"/tracks/{track['id']}/upload",
            files={"audio": ("a.mp3", io.BytesIO(b"\x03" * 128), "audio/mpeg")},
        )
        content_id = upload.json()["contentId"]

        response = client.delete(f"/tracks/{track['id']}")
        assert response.status_code == 200
        assert store.unpinned == [content_id]
        assert db_session.query(Version).filter(Version.track_id == track["id"]).count() == 0

    def test_delete_keeps_content_shared_with_another_track(self, client: TestClient, make_track, store):
        """Content still referenced by another track stays pinned."""
        first = make_track(title="One")
        second = make_track(title="Two")
        for track in (first, second):
            client.post(
                f"/tracks/{track['id']}/upload",
                files={"audio": ("same.mp3", io.BytesIO(b"\x04" * 128), "audio/mpeg")},
            )

        response = client.delete(f"/tracks/{first['id']}")
        assert response.status_code == 200
        assert store.unpinned == []
