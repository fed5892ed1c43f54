"""Tests for song catalog endpoints."""


def _song(**overrides):
    body = {
        "title": "Song",
        "artist": "Artist",
        "audioUrl": "/api/stream/dQw4w9WgXcQ",
        "youtubeId": "dQw4w9WgXcQ",
    }
    body.update(overrides)
    return body


class TestSongs:
    """Tests for /api/songs."""

    def test_create_and_list(self, client, test_db):
        response = client.post("/api/songs", json=_song(album="Album", duration=215))
        assert response.status_code == 200
        song = response.json()
        assert song["album"] == "Album"
        assert song["duration"] == 215

        listed = client.get("/api/songs").json()
        assert listed == [song]

    def test_required_fields(self, client, test_db):
        response = client.post("/api/songs", json={"title": "Only title"})
        assert response.status_code == 400

    def test_duplicate_returns_existing(self, client, test_db):
        first = client.post("/api/songs", json=_song()).json()
        second = client.post("/api/songs", json=_song(title="Other")).json()
        assert second == first
        assert len(client.get("/api/songs").json()) == 1

    def test_alternate_field_names(self, client, test_db):
        song = client.post(
            "/api/songs",
            json={
                "title": "Song",
                "artist": "Artist",
                "audioUrl": "/api/stream/abcdefghijk",
                "externalId": "abcdefghijk",
                "durationSeconds": 60,
            },
        ).json()
        assert song["youtubeId"] == "abcdefghijk"
        assert song["duration"] == 60

    def test_delete(self, client, test_db):
        song = client.post("/api/songs", json=_song()).json()

        response = client.delete(f"/api/songs/{song['id']}")

        assert response.json() == {"success": True}
        assert client.get("/api/songs").json() == []
