import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.errors import AuthorizationDenied, NotFound, PersistenceError, ValidationFailed
from marketplace.models import Listing, Review, User
from marketplace.schemas import ReviewFields, validate_payload
from marketplace.services.sanitizer import strip_markup

logger = logging.getLogger(__name__)


class ReviewService:
    """Отзывы к объявлениям"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, listing_id: int, comment: str, rating: int, author: User) -> Review:
        """Отзыв и его привязка к объявлению сохраняются одной транзакцией"""
        result = validate_payload(ReviewFields, {"comment": strip_markup(comment), "rating": rating})
        if not result.ok:
            raise ValidationFailed(result.messages)
        fields = result.value

        listing = self.db.get(Listing, listing_id)
        if listing is None:
            raise NotFound("Listing not found")

        review = Review(comment=fields.comment, rating=fields.rating, author_id=author.id)
        listing.reviews.append(review)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving review for listing {listing_id}: {e}")
            raise PersistenceError("Failed to add review") from e

        self.db.refresh(review)
        logger.info(f"Review {review.id} added to listing {listing_id} by user {author.id}")
        return review

    def delete(self, listing_id: int, review_id: int, user: User) -> None:
        """Удалить отзыв может только его автор"""
        review = self.db.query(Review).filter(
            Review.id == review_id,
            Review.listing_id == listing_id,
        ).first()
        if review is None:
            raise NotFound("Review not found")

        if review.author_id != user.id:
            logger.warning(f"User {user.id} tried to delete review {review_id} of user {review.author_id}")
            raise AuthorizationDenied(
                "You are not the author of this review",
                redirect_to=f"/listings/{listing_id}",
            )

        self.db.delete(review)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting review {review_id}: {e}")
            raise PersistenceError("Failed to delete review") from e

        logger.info(f"Review {review_id} removed from listing {listing_id}")
