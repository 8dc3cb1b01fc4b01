from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.database import Base


class User(Base):
    """
    Пользователь площадки.
    Пароль хранится только в виде bcrypt-хэша.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    listings = relationship("Listing", back_populates="owner")
    reviews = relationship("Review", back_populates="author")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
