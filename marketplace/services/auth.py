"""
Регистрация и проверка учетных данных пользователей
"""
import logging

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.errors import DuplicateIdentity, InvalidCredentials, PersistenceError
from marketplace.models import User

logger = logging.getLogger(__name__)

# bcrypt учитывает только первые 72 байта пароля
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(
        password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
    )


# Проверка для несуществующего пользователя занимает столько же времени
_DUMMY_HASH = hash_password("not-a-real-password")


class AuthService:
    """Сервис учетных записей"""

    def __init__(self, db: Session):
        self.db = db

    def signup(self, username: str, email: str, password: str) -> User:
        """Создает пользователя с хэшированным паролем"""
        existing = self.db.query(User).filter(
            or_(User.username == username, User.email == email)
        ).first()
        if existing:
            raise DuplicateIdentity()

        user = User(username=username, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateIdentity() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {username}: {e}")
            raise PersistenceError("Failed to create account") from e

        self.db.refresh(user)
        logger.info(f"Registered user {user.username} (id={user.id})")
        return user

    def authenticate(self, username: str, password: str) -> User:
        """Проверяет пароль. Не различает неизвестного пользователя и неверный пароль."""
        user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user
