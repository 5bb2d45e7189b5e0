"""
Tests for ApiClient error translation and auth headers
"""
import pytest
import httpx

from rawgle.core.http_client import ApiClient
from rawgle.core.security import TokenStore
from rawgle.core.exceptions import (
    RawgleAPIError,
    NetworkError,
    UnauthorizedError,
    NotFoundError,
    ValidationFailedError,
    ServerError,
    InvalidResponseError,
    DEFAULT_ERROR_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    extract_error_message,
    handle_error,
)
from rawgle.schemas.review import ReviewCreate
from conftest import TEST_BASE_URL


class TestRequests:
    """Request construction"""

    @pytest.mark.asyncio
    async def test_bearer_token_attached(self, mock_client, handler):
        handler.queue(200, {"ok": True})

        data = await mock_client.get("/reviews/mine")

        assert data == {"ok": True}
        request = handler.requests[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/json"
        assert str(request.url) == f"{TEST_BASE_URL}/reviews/mine"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self, handler):
        handler.queue(200, {})
        client = ApiClient(base_url=TEST_BASE_URL, token_store=TokenStore(), transport=httpx.MockTransport(handler))

        await client.get("/reviews", params={"supplierId": "s1"})
        await client.disconnect()

        assert "Authorization" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_token_change_is_picked_up(self, mock_client, handler, token_store):
        handler.queue(200, {})
        handler.queue(200, {})

        await mock_client.get("/reviews/mine")
        token_store.set("other-token")
        await mock_client.get("/reviews/mine")

        assert handler.requests[1].headers["Authorization"] == "Bearer other-token"

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, mock_client, handler):
        handler.queue(204, None)

        assert await mock_client.delete("/reviews/r1") is None

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, handler):
        async with ApiClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(handler)) as client:
            assert client.is_connected
        assert not client.is_connected


class TestErrorTranslation:
    """HTTP failures become RawgleAPIError subclasses"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, error_class",
        [
            (400, ValidationFailedError),
            (401, UnauthorizedError),
            (403, ValidationFailedError),
            (404, NotFoundError),
            (422, ValidationFailedError),
            (500, ServerError),
            (502, ServerError),
        ],
    )
    async def test_status_mapping(self, mock_client, handler, status_code, error_class):
        handler.queue(status_code, {"error": "nope"})

        with pytest.raises(error_class) as exc_info:
            await mock_client.get("/reviews")

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_validation_message_is_verbatim(self, mock_client, handler):
        handler.queue(400, {"error": "Comment must be at least 10 characters"})

        with pytest.raises(ValidationFailedError) as exc_info:
            await mock_client.post("/reviews", json={})

        assert exc_info.value.message == "Comment must be at least 10 characters"

    @pytest.mark.asyncio
    async def test_validation_without_message_falls_back(self, mock_client, handler):
        handler.queue(400, None)

        with pytest.raises(ValidationFailedError) as exc_info:
            await mock_client.post("/reviews", json={})

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_unauthorized_message_is_generic(self, mock_client, handler):
        handler.queue(401, {"error": "jwt malformed"})

        with pytest.raises(UnauthorizedError) as exc_info:
            await mock_client.get("/reviews/mine")

        assert "jwt" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self, mock_client, handler):
        handler.queue(200, httpx.ReadTimeout("timed out"))

        with pytest.raises(NetworkError) as exc_info:
            await mock_client.get("/reviews")

        assert exc_info.value.message == NETWORK_ERROR_MESSAGE
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [httpx.DecodingError("bad gzip"), httpx.TooManyRedirects("redirect loop")],
    )
    async def test_other_request_errors_are_network_errors(self, mock_client, handler, error):
        handler.queue(200, error)

        with pytest.raises(NetworkError):
            await mock_client.get("/reviews")

    @pytest.mark.asyncio
    async def test_corrupt_compressed_body_is_network_error(self):
        def corrupt_gzip(request):
            return httpx.Response(200, content=b"not gzip at all", headers={"Content-Encoding": "gzip"})

        async with ApiClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(corrupt_gzip)) as client:
            with pytest.raises(NetworkError):
                await client.get("/reviews")

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, mock_client, handler):
        handler.queue(200, "<html>maintenance</html>")

        with pytest.raises(InvalidResponseError):
            await mock_client.get("/reviews")

    @pytest.mark.asyncio
    async def test_success_body_ignored_when_not_expected(self, mock_client, handler):
        handler.queue(200, "Deleted")

        assert await mock_client.delete("/reviews/r1", expect_json=False) is None


class TestErrorMessages:
    """Message extraction and display strings"""

    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"error": "Bad rating"}, "Bad rating"),
            ({"error": {"message": "Nested"}}, "Nested"),
            ({"message": "Plain message"}, "Plain message"),
            ({"detail": "Not allowed"}, "Not allowed"),
            ({"detail": [{"msg": "field required"}, {"msg": "too long"}]}, "field required; too long"),
            ("Service down", "Service down"),
            ({"unrelated": 1}, None),
            ({"error": ""}, None),
            (None, None),
        ],
    )
    def test_extract_error_message(self, body, expected):
        assert extract_error_message(body) == expected

    def test_handle_api_error(self):
        assert handle_error(NotFoundError("Review not found", status_code=404)) == "Review not found"

    def test_handle_plain_exception(self):
        assert handle_error(RuntimeError("kaput")) == "kaput"

    def test_handle_empty_exception(self):
        assert handle_error(RuntimeError()) == DEFAULT_ERROR_MESSAGE

    def test_handle_validation_error_strips_prefix(self):
        with pytest.raises(ValueError) as exc_info:
            ReviewCreate(supplier_id="s1", rating=0, title="A fine title", comment="Long enough comment")

        assert handle_error(exc_info.value) == "Please select a star rating"

    def test_base_error_default_message(self):
        assert RawgleAPIError().message == DEFAULT_ERROR_MESSAGE
