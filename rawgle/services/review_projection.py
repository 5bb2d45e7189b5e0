"""
Derived review view: rating summary plus the filtered and sorted list.

Everything here is a pure function of (reviews, criteria). Nothing reads or
writes store state, so results can be memoised on the identity of the inputs.
"""
from pydantic import BaseModel
from typing import Dict, List, Optional, Sequence
from rawgle.schemas.review import Review, FilterSortCriteria, SortBy

RATING_VALUES = (5, 4, 3, 2, 1)

RATING_LABELS = {
    1: "Poor",
    2: "Fair",
    3: "Good",
    4: "Very Good",
    5: "Excellent",
}


class RatingBucket(BaseModel):
    rating: int
    label: str
    count: int
    percentage: float

    model_config = {"frozen": True}


class ProjectedView(BaseModel):
    filtered: List[Review]
    rating_distribution: Dict[int, int]
    average_rating: float
    total_reviews: int
    breakdown: List[RatingBucket]

    model_config = {"frozen": True}

    @property
    def filtered_count(self) -> int:
        return len(self.filtered)


def rating_label(rating: int) -> str:
    return RATING_LABELS.get(rating, "")


def rating_distribution(reviews: Sequence[Review]) -> Dict[int, int]:
    """Count of reviews per rating; ratings nobody gave are absent"""
    distribution: Dict[int, int] = {}
    for review in reviews:
        distribution[review.rating] = distribution.get(review.rating, 0) + 1
    return distribution


def average_rating(reviews: Sequence[Review]) -> float:
    if not reviews:
        return 0
    return sum(review.rating for review in reviews) / len(reviews)


def rating_breakdown(reviews: Sequence[Review]) -> List[RatingBucket]:
    """One bucket per rating, 5 down to 1, for the summary bars"""
    distribution = rating_distribution(reviews)
    total = len(reviews)
    buckets = []
    for rating in RATING_VALUES:
        count = distribution.get(rating, 0)
        percentage = (count / total) * 100 if total > 0 else 0.0
        buckets.append(RatingBucket(rating=rating, label=rating_label(rating), count=count, percentage=percentage))
    return buckets


def filter_reviews(reviews: Sequence[Review], criteria: FilterSortCriteria) -> List[Review]:
    """Exact rating match unless "all"; optionally only reviews with photos"""
    result = []
    for review in reviews:
        if criteria.rating_filter != "all" and review.rating != criteria.rating_filter:
            continue
        if criteria.show_photos_only and not review.has_photos:
            continue
        result.append(review)
    return result


def sort_reviews(reviews: Sequence[Review], sort_by: Optional[SortBy]) -> List[Review]:
    """Stable sort; equal keys keep their relative order"""
    if sort_by == SortBy.NEWEST:
        return sorted(reviews, key=lambda r: r.created_at, reverse=True)
    if sort_by == SortBy.OLDEST:
        return sorted(reviews, key=lambda r: r.created_at)
    if sort_by == SortBy.HIGHEST:
        return sorted(reviews, key=lambda r: r.rating, reverse=True)
    if sort_by == SortBy.LOWEST:
        return sorted(reviews, key=lambda r: r.rating)
    if sort_by == SortBy.HELPFUL:
        return sorted(reviews, key=lambda r: r.likes_count or 0, reverse=True)
    return list(reviews)


def project(reviews: Sequence[Review], criteria: Optional[FilterSortCriteria] = None) -> ProjectedView:
    """
    Build the view rendered by a review list.

    Distribution, average and total always describe every loaded review;
    only `filtered` honours the criteria. Anonymous reviews come back
    redacted.
    """
    criteria = criteria or FilterSortCriteria()
    filtered = sort_reviews(filter_reviews(reviews, criteria), criteria.sort_by)
    return ProjectedView(
        filtered=[review.redacted() for review in filtered],
        rating_distribution=rating_distribution(reviews),
        average_rating=average_rating(reviews),
        total_reviews=len(reviews),
        breakdown=rating_breakdown(reviews),
    )
