from typing import Optional, Union, Dict, Any
import logging
from pydantic import ValidationError
from rawgle.config import settings
from rawgle.core.http_client import ApiClient, api_client as default_api_client
from rawgle.core.exceptions import InvalidResponseError
from rawgle.schemas.review import (
    Review,
    ReviewCreate,
    ReviewUpdate,
    ReviewPage,
    ReviewEnvelope,
)

logger = logging.getLogger(__name__)

ReviewCreateData = Union[ReviewCreate, Dict[str, Any]]
ReviewUpdateData = Union[ReviewUpdate, Dict[str, Any]]


class ReviewsAPI:
    """Review endpoints of the Rawgle backend"""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or default_api_client

    @staticmethod
    def _page_size(limit: Optional[int]) -> int:
        if not limit:
            return settings.REVIEWS_PAGE_SIZE
        return max(1, min(limit, settings.MAX_PAGE_SIZE))

    @staticmethod
    def _parse_page(data: Any) -> ReviewPage:
        try:
            return ReviewPage.model_validate(data or {})
        except ValidationError as e:
            logger.error(f"Malformed review page: {e}")
            raise InvalidResponseError() from e

    @staticmethod
    def _parse_review(data: Any) -> Review:
        try:
            return ReviewEnvelope.model_validate(data or {}).review
        except ValidationError as e:
            logger.error(f"Malformed review response: {e}")
            raise InvalidResponseError() from e

    async def get_by_supplier(self, supplier_id: str, page: int = 1, limit: Optional[int] = None) -> ReviewPage:
        """GET /reviews?supplierId=&page=&limit="""
        data = await self.client.get(
            "/reviews",
            params={"supplierId": supplier_id, "page": page, "limit": self._page_size(limit)},
        )
        return self._parse_page(data)

    async def get_user_reviews(self, page: int = 1, limit: Optional[int] = None) -> ReviewPage:
        """GET /reviews/mine?page=&limit= (scoped by the bearer token)"""
        data = await self.client.get(
            "/reviews/mine",
            params={"page": page, "limit": self._page_size(limit)},
        )
        return self._parse_page(data)

    async def create(self, review_data: ReviewCreateData) -> Review:
        """POST /reviews"""
        payload = ReviewCreate.model_validate(review_data)
        data = await self.client.post("/reviews", json=payload.model_dump(by_alias=True, exclude_none=True))
        return self._parse_review(data)

    async def update(self, review_id: str, review_data: ReviewUpdateData) -> Review:
        """PUT /reviews/{id}"""
        payload = ReviewUpdate.model_validate(review_data)
        data = await self.client.put(
            f"/reviews/{review_id}",
            json=payload.model_dump(by_alias=True, exclude_unset=True, exclude_none=True),
        )
        return self._parse_review(data)

    async def delete(self, review_id: str) -> None:
        """DELETE /reviews/{id}; any body on success is ignored"""
        await self.client.delete(f"/reviews/{review_id}", expect_json=False)


reviews_api = ReviewsAPI()
