import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.errors import DuplicateIdentity, InvalidCredentials, ValidationFailed
from marketplace.models import User
from marketplace.schemas import SignupPayload, LoginPayload, validate_payload
from marketplace.services.auth import AuthService
from marketplace.web import (
    REDIRECT_KEY, flash, get_current_user, login_user, logout_user, render
)

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/signup", response_class=HTMLResponse)
def signup_form(request: Request, current_user: Optional[User] = Depends(get_current_user)):
    """Форма регистрации"""
    return render(request, "users/signup.html")


@router.post("/signup")
def signup(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Регистрация и автоматический вход"""
    result = validate_payload(SignupPayload, {"username": username, "email": email, "password": password})
    if not result.ok:
        raise ValidationFailed(result.messages)
    data = result.value

    try:
        user = AuthService(db).signup(data.username, data.email, data.password)
    except DuplicateIdentity as e:
        flash(request, "error", e.message)
        return RedirectResponse("/signup", status_code=303)

    login_user(request, user)
    flash(request, "success", f"Welcome, {user.username}!")
    return RedirectResponse("/listings", status_code=303)


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request, current_user: Optional[User] = Depends(get_current_user)):
    """Форма входа"""
    return render(request, "users/login.html")


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Вход; после успеха возвращает на страницу, с которой отправили на логин"""
    result = validate_payload(LoginPayload, {"username": username, "password": password})
    if not result.ok:
        raise ValidationFailed(result.messages)
    data = result.value

    try:
        user = AuthService(db).authenticate(data.username, data.password)
    except InvalidCredentials as e:
        flash(request, "error", e.message)
        return RedirectResponse("/login", status_code=303)

    redirect_url = request.session.pop(REDIRECT_KEY, None) or "/listings"
    login_user(request, user)
    flash(request, "success", "Welcome back!")
    logger.info(f"User {user.username} logged in")
    return RedirectResponse(redirect_url, status_code=303)


@router.get("/logout")
def logout(request: Request):
    logout_user(request)
    flash(request, "success", "You are logged out!")
    return RedirectResponse("/listings", status_code=303)
