"""
Pytest configuration and fixtures
"""
import json
import pytest
import pytest_asyncio
import httpx
from datetime import datetime, timedelta, timezone

from rawgle.core.http_client import ApiClient
from rawgle.core.security import TokenStore
from rawgle.api.reviews import ReviewsAPI
from rawgle.schemas.review import Review
from rawgle.services.review_store import ReviewStore
from fake_backend import create_fake_backend, TEST_TOKEN

TEST_BASE_URL = "http://testserver/api"
BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_review_data(review_id: str, rating: int = 5, **overrides) -> dict:
    """Review as the backend serializes it (camelCase)"""
    data = {
        "id": review_id,
        "supplierId": "s1",
        "userId": "u2",
        "userName": "Jane Doe",
        "rating": rating,
        "title": "Great raw food",
        "comment": "My dogs love the chicken mix.",
        "photos": [],
        "anonymous": False,
        "wouldRecommend": True,
        "likesCount": 0,
        "repliesCount": 0,
        "createdAt": BASE_TIME.isoformat(),
        "userLiked": False,
    }
    data.update(overrides)
    return data


def make_review(review_id: str, rating: int = 5, **overrides) -> Review:
    return Review.model_validate(make_review_data(review_id, rating, **overrides))


def page_body(reviews: list, current_page: int = 1, total_pages: int = 1, total_results: int = None) -> dict:
    return {
        "reviews": reviews,
        "pagination": {
            "currentPage": current_page,
            "totalPages": total_pages,
            "totalResults": total_results if total_results is not None else len(reviews),
            "hasMore": current_page < total_pages,
        },
    }


class RecordingHandler:
    """httpx.MockTransport handler returning queued responses and keeping every request"""

    def __init__(self):
        self.requests = []
        self.responses = []

    def queue(self, status_code: int = 200, body=None):
        self.responses.append((status_code, body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": "no response queued"})
        status_code, body = self.responses.pop(0)
        if isinstance(body, Exception):
            raise body
        if body is None:
            return httpx.Response(status_code)
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, content=json.dumps(body), headers={"Content-Type": "application/json"})
        return httpx.Response(status_code, text=body)


@pytest.fixture
def token_store():
    return TokenStore(TEST_TOKEN)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest_asyncio.fixture
async def mock_client(handler, token_store):
    """ApiClient talking to a MockTransport"""
    client = ApiClient(
        base_url=TEST_BASE_URL,
        token_store=token_store,
        transport=httpx.MockTransport(handler),
    )
    yield client
    await client.disconnect()


@pytest.fixture
def mock_store(mock_client):
    return ReviewStore(ReviewsAPI(mock_client), page_size=5)


@pytest.fixture
def backend_reviews():
    """8 reviews for supplier s1, newest first, plus one for another supplier"""
    reviews = []
    ratings = [5, 4, 5, 3, 5, 2, 4, 1]
    for index, rating in enumerate(ratings, start=1):
        reviews.append(make_review_data(
            f"r{index}",
            rating=rating,
            userId="u1" if index == 2 else f"u{index + 10}",
            likesCount=index % 4,
            photos=["https://cdn.rawgle.com/p.jpg"] if index % 3 == 0 else [],
            createdAt=(BASE_TIME - timedelta(days=index)).isoformat(),
        ))
    reviews.append(make_review_data("r9", rating=3, supplierId="s2", userId="u1"))
    return reviews


@pytest.fixture
def fake_backend(backend_reviews):
    return create_fake_backend(backend_reviews)


@pytest_asyncio.fixture
async def backend_client(fake_backend, token_store):
    """ApiClient routed to the in-process FastAPI backend"""
    client = ApiClient(
        base_url=TEST_BASE_URL,
        token_store=token_store,
        transport=httpx.ASGITransport(app=fake_backend),
    )
    yield client
    await client.disconnect()


@pytest.fixture
def store(backend_client):
    return ReviewStore(ReviewsAPI(backend_client), page_size=5)
