from typing import Optional, List, Tuple
from enum import Enum
import logging
from pydantic import ValidationError
from rawgle.api.reviews import ReviewsAPI, ReviewCreateData, ReviewUpdateData, reviews_api as default_reviews_api
from rawgle.core.exceptions import RawgleAPIError, handle_error
from rawgle.schemas.review import Review, ReviewPage, Pagination, FilterSortCriteria
from rawgle.services.review_projection import ProjectedView, project

logger = logging.getLogger(__name__)


class StoreStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MUTATING = "mutating"


class ReviewStore:
    """
    Client-side review collection for one target: a supplier, or the
    signed-in user's own reviews when the target is None.

    The list is replaced on every change, never mutated in place, so callers
    may hold on to `reviews` as a snapshot. Errors never propagate: they end
    up in `error` as a single display string.
    """

    def __init__(self, api: Optional[ReviewsAPI] = None, page_size: Optional[int] = None):
        self.api = api or default_reviews_api
        self.page_size = page_size
        self.reviews: List[Review] = []
        self.pagination = Pagination()
        self.error: Optional[str] = None
        self.target: Optional[str] = None
        self._generation = 0
        self._fetches_in_flight = 0
        self._mutations_in_flight = 0
        self._page_fetch_in_flight = False
        self._projection_cache: Optional[Tuple[List[Review], FilterSortCriteria, ProjectedView]] = None

    # State

    @property
    def loading(self) -> bool:
        """True while any operation is waiting on the network"""
        return self._fetches_in_flight > 0 or self._mutations_in_flight > 0

    @property
    def status(self) -> StoreStatus:
        if self._mutations_in_flight > 0:
            return StoreStatus.MUTATING
        if self._fetches_in_flight > 0:
            return StoreStatus.FETCHING
        return StoreStatus.IDLE

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more

    def clear_error(self):
        self.error = None

    def reset(self):
        """Forget the list, e.g. when switching to another supplier"""
        self._generation += 1
        self.reviews = []
        self.pagination = Pagination()
        self.target = None
        self.error = None
        self._page_fetch_in_flight = False

    def project(self, criteria: Optional[FilterSortCriteria] = None) -> ProjectedView:
        """Projection of the current list, recomputed only when the list or criteria change"""
        criteria = criteria or FilterSortCriteria()
        cached = self._projection_cache
        if cached is not None and cached[0] is self.reviews and cached[1] == criteria:
            return cached[2]
        view = project(self.reviews, criteria)
        self._projection_cache = (self.reviews, criteria, view)
        return view

    def _fail(self, action: str, error: Exception):
        self.error = handle_error(error)
        logger.error(f"Failed to {action}: {self.error}")

    # Fetching

    async def _fetch_page(self, target_id: Optional[str], page: int) -> ReviewPage:
        if target_id is None:
            return await self.api.get_user_reviews(page=page, limit=self.page_size)
        return await self.api.get_by_supplier(target_id, page=page, limit=self.page_size)

    async def fetch_first_page(self, target_id: Optional[str] = None) -> Optional[ReviewPage]:
        """
        Load page 1 for the target and replace the whole list with it.
        Any response still pending from an earlier fetch is discarded.
        """
        if target_id != self.target:
            self.reset()
        self._generation += 1
        generation = self._generation
        self.target = target_id
        self.error = None
        self._fetches_in_flight += 1
        self._page_fetch_in_flight = True
        try:
            result = await self._fetch_page(target_id, 1)
        except RawgleAPIError as e:
            if generation == self._generation:
                self._fail(f"fetch reviews for {target_id or 'current user'}", e)
            return None
        finally:
            self._fetches_in_flight -= 1
            if generation == self._generation:
                self._page_fetch_in_flight = False

        if generation != self._generation:
            logger.debug(f"Discarding stale page 1 for {target_id or 'current user'}")
            return None

        self.reviews = list(result.reviews)
        self.pagination = result.pagination
        logger.info(
            f"Loaded {len(result.reviews)} reviews for {target_id or 'current user'} "
            f"(page 1/{result.pagination.total_pages})"
        )
        return result

    async def fetch_supplier_reviews(self, supplier_id: str) -> Optional[ReviewPage]:
        return await self.fetch_first_page(supplier_id)

    async def fetch_user_reviews(self) -> Optional[ReviewPage]:
        return await self.fetch_first_page(None)

    async def load_next_page(self, target_id: Optional[str] = None) -> Optional[ReviewPage]:
        """
        Append the next page. No-op when there is nothing more to load or a
        page fetch is already running, so repeated calls never request the
        same page twice.
        """
        if not self.pagination.has_more or self._page_fetch_in_flight:
            return None
        if target_id != self.target:
            logger.warning(f"load_next_page for {target_id!r} while store holds {self.target!r}; ignoring")
            return None

        generation = self._generation
        page = self.pagination.current_page + 1
        self.error = None
        self._fetches_in_flight += 1
        self._page_fetch_in_flight = True
        try:
            result = await self._fetch_page(target_id, page)
        except RawgleAPIError as e:
            if generation == self._generation:
                self._fail(f"load page {page} for {target_id or 'current user'}", e)
            return None
        finally:
            self._fetches_in_flight -= 1
            if generation == self._generation:
                self._page_fetch_in_flight = False

        if generation != self._generation:
            logger.debug(f"Discarding stale page {page} for {target_id or 'current user'}")
            return None

        self.reviews = [*self.reviews, *result.reviews]
        self.pagination = result.pagination
        logger.info(f"Appended {len(result.reviews)} reviews (page {page}/{result.pagination.total_pages})")
        return result

    # Mutations. The list changes only after the server confirms.

    async def create(self, review_data: ReviewCreateData) -> Optional[Review]:
        """
        Submit a new review and put the server's copy at the head of the list.
        If the store moved to another target meanwhile, the review is returned
        but the list is left alone.
        """
        target = self.target
        self.error = None
        self._mutations_in_flight += 1
        try:
            review = await self.api.create(review_data)
        except (RawgleAPIError, ValidationError) as e:
            self._fail("create review", e)
            return None
        finally:
            self._mutations_in_flight -= 1

        if self.target != target:
            logger.debug(f"Review {review.id} created for {target or 'current user'}; store now holds {self.target!r}")
            return review
        if any(existing.id == review.id for existing in self.reviews):
            # A refresh that finished first already returned it
            logger.info(f"Review created: {review.id} (already listed)")
            return review

        self.reviews = [review, *self.reviews]
        logger.info(f"Review created: {review.id} (supplier {review.supplier_id})")
        return review

    async def update(self, review_id: str, review_data: ReviewUpdateData) -> Optional[Review]:
        """Submit edits and swap in the server's copy of the review"""
        review_id = str(review_id)
        self.error = None
        self._mutations_in_flight += 1
        try:
            updated = await self.api.update(review_id, review_data)
        except (RawgleAPIError, ValidationError) as e:
            self._fail(f"update review {review_id}", e)
            return None
        finally:
            self._mutations_in_flight -= 1

        self.reviews = [updated if review.id == review_id else review for review in self.reviews]
        logger.info(f"Review updated: {review_id}")
        return updated

    async def delete(self, review_id: str) -> bool:
        """Delete on the server, then drop the entry locally"""
        review_id = str(review_id)
        self.error = None
        self._mutations_in_flight += 1
        try:
            await self.api.delete(review_id)
        except RawgleAPIError as e:
            self._fail(f"delete review {review_id}", e)
            return False
        finally:
            self._mutations_in_flight -= 1

        self.reviews = [review for review in self.reviews if review.id != review_id]
        logger.info(f"Review deleted: {review_id}")
        return True
