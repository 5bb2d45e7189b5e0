"""Review schemas"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Union, Literal
from enum import Enum
from rawgle.config import settings
from rawgle.core.datetime_utils import ensure_aware

ANONYMOUS_NAME = "Anonymous"

CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class SortBy(str, Enum):
    """Client-side review ordering"""
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"
    HELPFUL = "helpful"


RatingFilter = Union[Literal["all"], int]


def _coerce_id(value):
    # Backends disagree on numeric vs string ids; treat them as opaque strings
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# Form rules shared by create and update payloads

def _check_rating(value: int) -> int:
    if value == 0:
        raise ValueError("Please select a star rating")
    if not 1 <= value <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return value


def _check_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Please provide a review title")
    if len(value) < settings.REVIEW_TITLE_MIN_LENGTH:
        raise ValueError(f"Title should be at least {settings.REVIEW_TITLE_MIN_LENGTH} characters")
    if len(value) > settings.REVIEW_TITLE_MAX_LENGTH:
        raise ValueError(f"Title should be less than {settings.REVIEW_TITLE_MAX_LENGTH} characters")
    return value


def _check_comment(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Please write your review")
    if len(value) < settings.REVIEW_COMMENT_MIN_LENGTH:
        raise ValueError(f"Review should be at least {settings.REVIEW_COMMENT_MIN_LENGTH} characters")
    if len(value) > settings.REVIEW_COMMENT_MAX_LENGTH:
        raise ValueError(f"Review should be less than {settings.REVIEW_COMMENT_MAX_LENGTH} characters")
    return value


def _check_photos(value: List[str]) -> List[str]:
    if len(value) > settings.REVIEW_MAX_PHOTOS:
        raise ValueError(f"You can upload up to {settings.REVIEW_MAX_PHOTOS} photos")
    for photo in value:
        if not photo or not isinstance(photo, str):
            raise ValueError(f"Invalid photo reference: {photo!r}")
    return value


class ReviewCreate(BaseModel):
    supplier_id: str = Field(..., min_length=1, description="Supplier being reviewed")
    # Unset form fields start empty so they get the form messages, not "Field required"
    rating: int = Field(0, validate_default=True, description="Rating from 1 to 5")
    title: str = Field("", validate_default=True)
    comment: str = Field("", validate_default=True)
    photos: List[str] = Field(default_factory=list, description="Photo URLs or upload handles (max 5)")
    anonymous: bool = False
    would_recommend: bool = True
    order_id: Optional[str] = None

    model_config = {**CAMEL_CONFIG}

    @field_validator("supplier_id", "order_id", mode="before")
    @classmethod
    def validate_ids(cls, v):
        return _coerce_id(v)

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v):
        return _check_rating(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        return _check_comment(v)

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, v):
        return _check_photos(v)


class ReviewUpdate(BaseModel):
    """Partial edit; only fields that were set are sent"""
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    photos: Optional[List[str]] = None
    anonymous: Optional[bool] = None
    would_recommend: Optional[bool] = None

    model_config = {**CAMEL_CONFIG}

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v):
        return _check_rating(v) if v is not None else v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v) if v is not None else v

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        return _check_comment(v) if v is not None else v

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, v):
        return _check_photos(v) if v is not None else v


class Review(BaseModel):
    id: str
    supplier_id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    title: str = ""
    comment: str = ""
    photos: List[str] = Field(default_factory=list)
    anonymous: bool = False
    would_recommend: bool = True
    likes_count: int = Field(0, ge=0)
    replies_count: int = Field(0, ge=0)
    created_at: datetime
    user_liked: bool = False

    model_config = {**CAMEL_CONFIG, "frozen": True}

    @field_validator("id", "supplier_id", "user_id", mode="before")
    @classmethod
    def validate_ids(cls, v):
        return _coerce_id(v)

    @field_validator("likes_count", "replies_count", "photos", mode="before")
    @classmethod
    def validate_missing(cls, v, info):
        # Servers send null for "none yet"
        if v is None:
            return [] if info.field_name == "photos" else 0
        return v

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v):
        return ensure_aware(v)

    @property
    def has_photos(self) -> bool:
        return len(self.photos) > 0

    @property
    def display_name(self) -> str:
        if self.anonymous:
            return ANONYMOUS_NAME
        return self.user_name or ANONYMOUS_NAME

    @property
    def likes_label(self) -> str:
        return f"{self.likes_count} {'like' if self.likes_count == 1 else 'likes'}"

    @property
    def replies_label(self) -> str:
        return f"{self.replies_count} {'reply' if self.replies_count == 1 else 'replies'}"

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        """Whether the viewer wrote this review (edit/delete are offered only then)"""
        return user_id is not None and self.user_id is not None and self.user_id == str(user_id)

    def redacted(self) -> "Review":
        """Copy safe to render: anonymous reviews lose every author field"""
        if not self.anonymous:
            return self
        return self.model_copy(update={"user_id": None, "user_name": None, "user_avatar": None})


class Pagination(BaseModel):
    current_page: int = Field(1, ge=0)
    total_pages: int = Field(1, ge=0)
    total_results: int = Field(0, ge=0)
    has_more: bool = False

    model_config = {**CAMEL_CONFIG, "frozen": True}


class ReviewPage(BaseModel):
    reviews: List[Review] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    model_config = {**CAMEL_CONFIG}


class ReviewEnvelope(BaseModel):
    """Body of create/update responses"""
    review: Review


class FilterSortCriteria(BaseModel):
    sort_by: Optional[SortBy] = SortBy.NEWEST
    rating_filter: RatingFilter = "all"
    show_photos_only: bool = False

    model_config = {**CAMEL_CONFIG, "frozen": True}

    @field_validator("rating_filter", mode="before")
    @classmethod
    def validate_rating_filter(cls, v):
        """Accept "all", 1-5, or their string forms coming from a select box"""
        if v is None or v == "all":
            return "all"
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v.strip())
        if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= 5:
            raise ValueError("Rating filter must be 'all' or 1-5")
        return v
