from typing import Optional, Annotated
from pydantic import BaseModel, Field, StringConstraints


class ListingPayload(BaseModel):
    """Данные формы создания/редактирования объявления"""
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=2000)]
    price: float = Field(..., ge=0, le=1_000_000)
    location: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    country: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    image: Optional[str] = None
