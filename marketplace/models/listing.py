from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.database import Base


class Listing(Base):
    """
    Объявление о жилье.
    Координаты всегда получены геокодированием location + country.
    """
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    location = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)

    geometry_type = Column(String(20), nullable=False, default="Point")
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)

    image_url = Column(String(1000), nullable=True)
    image_filename = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="listings")
    reviews = relationship("Review", back_populates="listing", order_by="Review.id")

    @property
    def geometry(self) -> dict:
        return {"type": self.geometry_type, "coordinates": [self.longitude, self.latitude]}

    @property
    def image(self) -> dict:
        return {"url": self.image_url, "filename": self.image_filename}

    def __repr__(self):
        return f"<Listing(id={self.id}, title={self.title[:50] if self.title else None})>"
