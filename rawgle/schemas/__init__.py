from rawgle.schemas.review import (
    Review,
    ReviewCreate,
    ReviewUpdate,
    ReviewPage,
    ReviewEnvelope,
    Pagination,
    FilterSortCriteria,
    SortBy,
)

__all__ = [
    "Review",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewPage",
    "ReviewEnvelope",
    "Pagination",
    "FilterSortCriteria",
    "SortBy",
]
