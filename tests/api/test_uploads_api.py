"""
Tests for image upload and retrieval endpoints.
"""

from __future__ import annotations

import re

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def post_image(client, data: bytes = PNG, content_type: str = "image/png", room: str = "art-room"):
    return client.post(
        "/api/upload/image",
        files={"image": ("cat.png", data, content_type)},
        data={"roomName": room},
    )


class TestUpload:
    def test_upload_and_fetch(self, client) -> None:
        response = post_image(client)

        assert response.status_code == 201
        body = response.json()
        assert re.fullmatch(r"\d+-[0-9a-f]{8}\.png", body["filename"])
        assert body["originalName"] == "cat.png"
        assert body["size"] == len(PNG)
        assert body["mimeType"] == "image/png"
        assert body["url"] == f"/api/uploads/art-room/{body['filename']}"

        fetched = client.get(body["url"])
        assert fetched.status_code == 200
        assert fetched.content == PNG
        assert fetched.headers["content-type"] == "image/png"

    def test_rejects_disallowed_type(self, client) -> None:
        response = post_image(client, data=b"<script>", content_type="text/html")
        assert response.status_code == 400

    def test_rejects_invalid_room(self, client) -> None:
        response = post_image(client, room="bad room!")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid room name"

    def test_rejects_oversized(self, client, rules) -> None:
        rules.uploads.max_upload_bytes = 16
        response = post_image(client)
        assert response.status_code == 413

    def test_requires_file(self, client) -> None:
        response = client.post("/api/upload/image", data={"roomName": "art-room"})
        assert response.status_code == 422


class TestFetch:
    def test_missing_image(self, client) -> None:
        assert client.get("/api/uploads/art-room/nothing.png").status_code == 404

    def test_other_room_cannot_see_image(self, client) -> None:
        filename = post_image(client).json()["filename"]
        assert client.get(f"/api/uploads/other-room/{filename}").status_code == 404


class TestServingHeaders:
    def test_png_served_inline_and_sandboxed(self, client) -> None:
        body = post_image(client).json()

        fetched = client.get(body["url"])

        assert fetched.headers["content-disposition"] == f'inline; filename="{body["filename"]}"'
        assert fetched.headers["content-security-policy"] == "default-src 'none'; style-src 'unsafe-inline'; sandbox"
        assert fetched.headers["x-content-type-options"] == "nosniff"
        assert fetched.headers["etag"].startswith('"')

    def test_svg_served_as_attachment(self, client) -> None:
        svg = b'<svg xmlns="http://www.w3.org/2000/svg"><script>alert(1)</script></svg>'
        body = post_image(client, data=svg, content_type="image/svg+xml").json()

        fetched = client.get(body["url"])

        assert fetched.status_code == 200
        assert fetched.headers["content-type"] == "image/svg+xml"
        assert fetched.headers["content-disposition"].startswith("attachment;")
        assert "sandbox" in fetched.headers["content-security-policy"]

    def test_etag_revalidation(self, client) -> None:
        url = post_image(client).json()["url"]
        etag = client.get(url).headers["etag"]

        cached = client.get(url, headers={"If-None-Match": etag})

        assert cached.status_code == 304
        assert cached.content == b""

    def test_oversized_upload_is_not_stored(self, client, rules, upload_store) -> None:
        rules.uploads.max_upload_bytes = 16

        response = post_image(client, data=PNG * 100)

        assert response.status_code == 413
        assert not (upload_store.base_path / "art-room").exists()
