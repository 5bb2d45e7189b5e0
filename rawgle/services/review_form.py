from pydantic import BaseModel, ValidationError
from typing import Optional, Dict, Any, Callable, Union
import logging
from rawgle.config import settings
from rawgle.core.exceptions import validation_messages
from rawgle.schemas.review import Review, ReviewCreate, ReviewUpdate
from rawgle.services.review_store import ReviewStore

logger = logging.getLogger(__name__)

REVIEW_SUBMITTED_MESSAGE = "Thank you for your review! You have earned PAWS rewards."
REVIEW_UPDATED_MESSAGE = "Your review has been updated."


class SubmitResult(BaseModel):
    success: bool
    review: Optional[Review] = None
    error: Optional[str] = None
    message: Optional[str] = None
    paws_earned: int = 0


class ReviewForm:
    """
    Validates review input and submits it through a ReviewStore.

    New reviews go through `store.create`, edits (when a review id is given)
    through `store.update`, so the store's list stays in sync with what the
    form submitted.
    """

    def __init__(
        self,
        store: ReviewStore,
        on_success: Optional[Callable[[Review], Any]] = None,
    ):
        self.store = store
        self.on_success = on_success
        self.submitting = False
        self.error: Optional[str] = None
        self.field_errors: Dict[str, str] = {}

    @staticmethod
    def validate(data: Union[Dict[str, Any], BaseModel], editing: bool = False) -> Dict[str, str]:
        """Return {field: message} for every invalid field (empty when valid)"""
        schema = ReviewUpdate if editing else ReviewCreate
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=editing)
        try:
            schema.model_validate(data)
        except ValidationError as e:
            return validation_messages(e)
        return {}

    def clear_error(self):
        self.error = None
        self.field_errors = {}

    async def submit(self, data: Union[Dict[str, Any], BaseModel], review_id: Optional[str] = None) -> SubmitResult:
        editing = review_id is not None
        self.field_errors = self.validate(data, editing=editing)
        if self.field_errors:
            return SubmitResult(success=False, error=next(iter(self.field_errors.values())))

        self.submitting = True
        self.error = None
        try:
            if editing:
                review = await self.store.update(review_id, data)
            else:
                review = await self.store.create(data)
        finally:
            self.submitting = False

        if review is None:
            self.error = self.store.error
            return SubmitResult(success=False, error=self.error)

        if self.on_success is not None:
            self.on_success(review)

        if editing:
            return SubmitResult(success=True, review=review, message=REVIEW_UPDATED_MESSAGE)

        logger.info(f"Review {review.id} submitted, {settings.REVIEW_REWARD_PAWS} PAWS earned")
        return SubmitResult(
            success=True,
            review=review,
            message=REVIEW_SUBMITTED_MESSAGE,
            paws_earned=settings.REVIEW_REWARD_PAWS,
        )
