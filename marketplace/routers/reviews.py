from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.errors import ValidationFailed
from marketplace.models import User
from marketplace.schemas import ReviewPayload, validate_payload
from marketplace.services.reviews import ReviewService
from marketplace.web import flash, require_user

router = APIRouter(prefix="/listings", tags=["reviews"])


@router.post("/{listing_id}/reviews")
def create_review(
    request: Request,
    listing_id: int,
    comment: str = Form("", alias="review[comment]"),
    rating: str = Form("", alias="review[rating]"),
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Добавить отзыв к объявлению"""
    result = validate_payload(ReviewPayload, {"review": {"comment": comment, "rating": rating}})
    if not result.ok:
        raise ValidationFailed(result.messages)
    review = result.value.review

    ReviewService(db).create(listing_id, review.comment, review.rating, current_user)
    flash(request, "success", "Review added successfully")
    return RedirectResponse(f"/listings/{listing_id}", status_code=303)


@router.delete("/{listing_id}/reviews/{review_id}")
def delete_review(
    request: Request,
    listing_id: int,
    review_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Удалить отзыв (только автор)"""
    ReviewService(db).delete(listing_id, review_id, current_user)
    flash(request, "success", "Review deleted successfully")
    return RedirectResponse(f"/listings/{listing_id}", status_code=303)
