from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.database import Base


class Review(Base):
    """
    Отзыв к объявлению
    """
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    comment = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    listing = relationship("Listing", back_populates="reviews")
    author = relationship("User", back_populates="reviews")

    def __repr__(self):
        return f"<Review(id={self.id}, listing_id={self.listing_id}, rating={self.rating})>"
