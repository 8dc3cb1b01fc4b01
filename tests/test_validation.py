"""
Проверка схем входных данных
"""
from marketplace.schemas import validate_payload, SCHEMAS, ListingPayload


def valid_listing(**overrides):
    data = {
        "title": "  Beach house  ",
        "description": "A cosy house right on the beach.",
        "price": "1500",
        "location": "Goa",
        "country": "India",
    }
    data.update(overrides)
    return data


def test_listing_is_coerced_and_trimmed():
    result = validate_payload("listing", valid_listing())
    assert result.ok
    assert result.value.title == "Beach house"
    assert result.value.price == 1500.0
    assert result.value.image is None


def test_listing_reports_every_violation():
    result = validate_payload(ListingPayload, {
        "title": "ab",
        "description": "short",
        "price": "-1",
        "location": "",
        "country": "I",
    })
    assert not result.ok
    fields = {v.field for v in result.errors}
    assert fields == {"title", "description", "price", "location", "country"}
    assert len(result.messages) == 5


def test_listing_price_upper_bound():
    assert validate_payload("listing", valid_listing(price="1000000")).ok
    assert not validate_payload("listing", valid_listing(price="1000001")).ok


def test_listing_title_is_trimmed_before_length_check():
    result = validate_payload("listing", valid_listing(title="  ab  "))
    assert [v.field for v in result.errors] == ["title"]


def test_review_is_nested():
    result = validate_payload("review", {"review": {"comment": "Lovely stay", "rating": "4"}})
    assert result.ok
    assert result.value.review.rating == 4

    missing = validate_payload("review", {})
    assert [v.field for v in missing.errors] == ["review"]


def test_review_rejects_out_of_range_rating_and_short_comment():
    result = validate_payload("review", {"review": {"comment": "ok", "rating": 6}})
    fields = sorted(v.field for v in result.errors)
    assert fields == ["review.comment", "review.rating"]

    assert not validate_payload("review", {"review": {"comment": "Nice!", "rating": 0}}).ok
    assert not validate_payload("review", {"review": {"comment": "Nice!", "rating": "4.5"}}).ok


def test_signup_lowercases_email():
    result = validate_payload("user-signup", {
        "username": "ann1",
        "email": "  Ann@X.com ",
        "password": "secret1",
    })
    assert result.ok
    assert result.value.email == "ann@x.com"


def test_signup_rules():
    result = validate_payload("user-signup", {
        "username": "ann_1",
        "email": "not-an-email",
        "password": "12345",
    })
    assert sorted(v.field for v in result.errors) == ["email", "password", "username"]


def test_login_requires_password():
    result = validate_payload("user-login", {"username": "ann1", "password": ""})
    assert [v.field for v in result.errors] == ["password"]


def test_all_schemas_are_named():
    assert set(SCHEMAS) == {"listing", "review", "user-signup", "user-login"}
