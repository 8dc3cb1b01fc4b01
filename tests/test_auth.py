"""
Регистрация, вход и выход
"""
import pytest

from marketplace.errors import DuplicateIdentity, InvalidCredentials
from marketplace.models import User
from marketplace.services.auth import AuthService, hash_password, verify_password

from conftest import login


def test_password_is_hashed():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)


def test_signup_stores_hash(db, make_user):
    user = make_user()
    assert user.id is not None
    assert user.password_hash != "secret1"
    assert verify_password("secret1", user.password_hash)


def test_signup_rejects_duplicate_username_or_email(db, make_user):
    make_user("ann1", "ann@x.com")
    with pytest.raises(DuplicateIdentity):
        AuthService(db).signup("ann1", "other@x.com", "secret1")
    with pytest.raises(DuplicateIdentity):
        AuthService(db).signup("bob2", "ann@x.com", "secret1")


def test_authenticate_does_not_reveal_which_part_is_wrong(db, make_user):
    make_user()
    service = AuthService(db)
    assert service.authenticate("ann1", "secret1").username == "ann1"

    with pytest.raises(InvalidCredentials) as unknown:
        service.authenticate("nobody", "secret1")
    with pytest.raises(InvalidCredentials) as wrong:
        service.authenticate("ann1", "wrong-password")
    assert unknown.value.message == wrong.value.message


def test_signup_logs_in_and_redirects(client, db):
    response = client.post(
        "/signup",
        data={"username": "ann1", "email": "Ann@X.com", "password": "secret1"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/listings"
    assert db.query(User).filter(User.username == "ann1").one().email == "ann@x.com"

    page = client.get("/listings")
    assert "ann1" in page.text
    assert "Log out" in page.text


def test_duplicate_signup_flashes_error(client, make_user):
    make_user("ann1", "ann@x.com")
    response = client.post("/signup", data={"username": "ann1", "email": "new@x.com", "password": "secret1"})
    assert response.url.path == "/signup"
    assert "already registered" in response.text


def test_invalid_signup_shows_every_violation(client, db):
    response = client.post("/signup", data={"username": "a", "email": "bad", "password": "1"})
    assert response.status_code == 400
    assert "username" in response.text
    assert "email" in response.text
    assert "at least 6 characters" in response.text
    assert db.query(User).count() == 0


def test_login_replays_intended_destination(client, make_user):
    make_user()

    response = client.get("/listings/new", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    response = login(client)
    assert response.status_code == 303
    assert response.headers["location"] == "/listings/new"

    # Сохраненная страница используется один раз
    client.get("/logout")
    response = login(client)
    assert response.headers["location"] == "/listings"


def test_login_with_wrong_password(client, make_user):
    make_user()
    response = client.post("/login", data={"username": "ann1", "password": "nope"})
    assert response.url.path == "/login"
    assert "Invalid username or password" in response.text


def test_logout_is_idempotent(client, make_user):
    make_user()
    login(client)
    for _ in range(2):
        response = client.get("/logout", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/listings"
    assert client.get("/listings/new", follow_redirects=False).headers["location"] == "/login"
