"""
HTTP surface of /api/images: upload, raw serving, listing, update, delete.
"""

import pytest
from sqlalchemy import text

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 56


async def _upload(client, name="logo.png", data=PNG_BYTES, content_type="image/png", **form):
    return await client.post("/api/images", files={"file": (name, data, content_type)}, data=form)


async def _count_images(session):
    result = await session.execute(text("SELECT COUNT(*) FROM images"))
    return result.scalar_one()


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_returns_summary(self, client):
        response = await _upload(client, category="logos", description="Club logo")

        assert response.status_code == 200
        body = response.json()
        assert body["image_name"] == "logo.png"
        assert body["file_size"] == len(PNG_BYTES)
        assert body["content_type"] == "image/png"
        assert body["category"] == "logos"
        assert "uploaded_at" in body
        assert "image_data" not in body

    @pytest.mark.asyncio
    async def test_oversized_upload_is_rejected_and_not_stored(self, client, session, settings):
        response = await _upload(client, data=b"\x00" * (settings.MAX_FILE_SIZE + 1))

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"
        assert await _count_images(session) == 0

    @pytest.mark.asyncio
    async def test_upload_at_exact_limit_is_accepted(self, client, settings):
        response = await _upload(client, data=b"\x00" * settings.MAX_FILE_SIZE)

        assert response.status_code == 200
        assert response.json()["file_size"] == settings.MAX_FILE_SIZE

    @pytest.mark.asyncio
    async def test_declared_body_far_too_large_is_rejected_before_parsing(self, client, session, settings):
        response = await _upload(client, data=b"\x00" * (settings.MAX_FILE_SIZE + 70 * 1024))

        assert response.status_code == 413
        assert await _count_images(session) == 0

    @pytest.mark.asyncio
    async def test_text_plain_is_rejected_and_not_stored(self, client, session):
        response = await _upload(client, name="notes.txt", data=b"hello", content_type="text/plain")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"
        assert await _count_images(session) == 0

    @pytest.mark.asyncio
    async def test_empty_file_is_bad_request(self, client):
        response = await _upload(client, data=b"")

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_missing_file_field_is_bad_request(self, client):
        response = await client.post("/api/images", data={"category": "logos"})

        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"

    @pytest.mark.asyncio
    async def test_chunked_oversized_upload_stops_reading_the_body(self, client, session, settings):
        boundary = "clubupload"
        chunk = b"\x00" * 1024
        total = 200 * len(chunk)
        pulled = 0

        async def body():
            nonlocal pulled
            yield (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="file"; filename="big.png"\r\n'
                f"Content-Type: image/png\r\n\r\n"
            ).encode()
            while pulled < total:
                pulled += len(chunk)
                yield chunk
            yield f"\r\n--{boundary}--\r\n".encode()

        response = await client.post(
            "/api/images",
            content=body(),
            headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        )

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"
        assert pulled <= settings.MAX_FILE_SIZE + 4 * len(chunk)
        assert pulled < total
        assert await _count_images(session) == 0

    @pytest.mark.asyncio
    async def test_file_sent_as_category_is_bad_request(self, client, session):
        response = await client.post(
            "/api/images",
            files={
                "file": ("logo.png", PNG_BYTES, "image/png"),
                "category": ("category.txt", b"logos", "text/plain"),
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
        assert await _count_images(session) == 0


class TestServe:

    @pytest.mark.asyncio
    async def test_raw_bytes_with_stored_headers(self, client):
        image_id = (await _upload(client, name="badge.gif", data=b"GIF89a-data", content_type="image/gif")).json()["id"]

        response = await client.get(f"/api/images/{image_id}")

        assert response.status_code == 200
        assert response.content == b"GIF89a-data"
        assert response.headers["content-type"] == "image/gif"
        assert response.headers["content-disposition"] == 'inline; filename="badge.gif"'

    @pytest.mark.asyncio
    async def test_missing_image(self, client):
        response = await client.get("/api/images/404")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_id", ["0", "2147483648", "99999999999999999999"])
    async def test_out_of_range_image_id(self, client, image_id):
        for response in (
            await client.get(f"/api/images/{image_id}"),
            await client.put(f"/api/images/{image_id}", json={"category": "x"}),
            await client.delete(f"/api/images/{image_id}"),
        ):
            assert response.status_code == 404
            assert response.json()["code"] == "NOT_FOUND"


class TestListing:

    @pytest.mark.asyncio
    async def test_total_counts_all_matching_rows_not_the_page(self, client, session):
        for index in range(5):
            await _upload(client, name=f"p{index}.png", category="photos")
        await _upload(client, name="logo.png", category="logos")

        response = await client.get("/api/images", params={"category": "photos", "page": 1, "page_size": 2})

        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        independent = await session.execute(text("SELECT COUNT(*) FROM images WHERE category = 'photos'"))
        assert body["total"] == independent.scalar_one() == 5
        assert body["page"] == 1
        assert body["page_size"] == 2
        assert all("image_data" not in item for item in body["data"])

    @pytest.mark.asyncio
    async def test_unfiltered_total(self, client, session):
        for index in range(3):
            await _upload(client, name=f"p{index}.png")

        body = (await client.get("/api/images", params={"page_size": 1})).json()

        assert body["total"] == await _count_images(session) == 3
        assert len(body["data"]) == 1

    @pytest.mark.asyncio
    async def test_pages_do_not_overlap(self, client):
        for index in range(3):
            await _upload(client, name=f"p{index}.png")

        first = (await client.get("/api/images", params={"page": 1, "page_size": 2})).json()["data"]
        second = (await client.get("/api/images", params={"page": 2, "page_size": 2})).json()["data"]

        assert len(first) == 2
        assert len(second) == 1
        assert {item["id"] for item in first}.isdisjoint({item["id"] for item in second})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params, expected", [
        ({}, (1, 20)),
        ({"page": 0}, (1, 20)),
        ({"page": -3, "page_size": 0}, (1, 1)),
        ({"page_size": 500}, (1, 100)),
    ])
    async def test_pagination_is_clamped(self, client, params, expected):
        body = (await client.get("/api/images", params=params)).json()

        assert (body["page"], body["page_size"]) == expected

    @pytest.mark.asyncio
    async def test_page_far_past_the_end_is_empty(self, client):
        await _upload(client)

        response = await client.get("/api/images", params={"page": 10**20})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["total"] == 1
        assert body["page"] == 10**20


class TestMetadataChanges:

    @pytest.mark.asyncio
    async def test_update_keeps_omitted_fields(self, client):
        image_id = (await _upload(client, category="logos", description="old")).json()["id"]

        response = await client.put(f"/api/images/{image_id}", json={"description": "new"})

        assert response.status_code == 200
        body = response.json()
        assert body["description"] == "new"
        assert body["category"] == "logos"
        assert "image_data" not in body

    @pytest.mark.asyncio
    async def test_delete_then_missing(self, client):
        image_id = (await _upload(client)).json()["id"]

        assert (await client.delete(f"/api/images/{image_id}")).json() == {
            "success": True,
            "message": "Image deleted successfully",
        }
        assert (await client.get(f"/api/images/{image_id}")).status_code == 404
        assert (await client.delete(f"/api/images/{image_id}")).status_code == 404
