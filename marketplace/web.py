"""
Общие помощники веб-слоя: шаблоны, flash-сообщения и текущий пользователь
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.database import SessionLocal, get_db
from marketplace.errors import AuthenticationRequired
from marketplace.models import User

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
logger = logging.getLogger(__name__)

FLASH_KEY = "_flashes"
USER_KEY = "user_id"
REDIRECT_KEY = "redirect_url"


def flash(request: Request, category: str, message: str) -> None:
    """Сообщение, которое будет показано на следующей отрисованной странице"""
    messages = request.session.get(FLASH_KEY, [])
    messages.append([category, message])
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> Dict[str, List[str]]:
    result: Dict[str, List[str]] = {"success": [], "error": []}
    if "session" not in request.scope:
        return result
    for category, message in request.session.pop(FLASH_KEY, []):
        result.setdefault(category, []).append(message)
    return result


def login_user(request: Request, user: User) -> None:
    request.session[USER_KEY] = user.id


def logout_user(request: Request) -> None:
    request.session.pop(USER_KEY, None)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """Пользователь текущей сессии или None"""
    user = None
    user_id = request.session.get(USER_KEY)
    if user_id is not None:
        try:
            user = db.get(User, user_id)
        except SQLAlchemyError as e:
            # Без БД запрос обслуживается как анонимный
            db.rollback()
            logger.error(f"Error loading user {user_id}: {e}")
        else:
            if user is None:
                logout_user(request)
    request.state.current_user = user
    return user


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


def resolve_current_user(request: Request) -> Optional[User]:
    """
    Текущий пользователь для страниц, где зависимость get_current_user
    не выполнялась: страницы ошибок, формы регистрации и входа.
    """
    if hasattr(request.state, "current_user"):
        return request.state.current_user
    if "session" not in request.scope:
        return None

    db = SessionLocal()
    try:
        return get_current_user(request, db)
    finally:
        db.close()


def render(request: Request, template: str, status_code: int = 200, **context):
    flashes = pop_flashes(request)
    context.setdefault("current_user", resolve_current_user(request))
    context.setdefault("success", flashes["success"])
    context.setdefault("error", flashes["error"])
    return templates.TemplateResponse(request, template, context, status_code=status_code)
