from typing import Optional
import logging

from rawgle.config import settings
from rawgle.core.http_client import ApiClient, api_client, init_client, close_client
from rawgle.api.reviews import ReviewsAPI
from rawgle.services.review_store import ReviewStore
from rawgle.services.review_form import ReviewForm

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

__all__ = [
    "configure_logging",
    "create_review_store",
    "create_review_form",
    "init_client",
    "close_client",
]


def configure_logging(level: Optional[str] = None):
    """Configure root logging the same way for scripts, notebooks and tests"""
    if level is None:
        level = settings.LOG_LEVEL or ("INFO" if settings.DEBUG else "WARNING")
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # Reduce HTTP client log verbosity
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_review_store(client: Optional[ApiClient] = None, page_size: Optional[int] = None) -> ReviewStore:
    """Wire ApiClient -> ReviewsAPI -> ReviewStore; the shared client is used by default"""
    store = ReviewStore(ReviewsAPI(client or api_client), page_size=page_size)
    logger.debug(f"Review store created (page size {page_size or settings.REVIEWS_PAGE_SIZE})")
    return store


def create_review_form(store: ReviewStore, on_success=None) -> ReviewForm:
    return ReviewForm(store, on_success=on_success)
