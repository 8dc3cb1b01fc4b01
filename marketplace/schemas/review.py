from typing import Annotated
from pydantic import BaseModel, Field, StringConstraints


class ReviewFields(BaseModel):
    comment: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=500)]
    rating: int = Field(..., ge=1, le=5)


class ReviewPayload(BaseModel):
    """Форма отзыва передается вложенным объектом review[...]"""
    review: ReviewFields
