from marketplace.services.sanitizer import strip_markup


def test_plain_text_is_unchanged():
    assert strip_markup("Sea view, 2 rooms") == "Sea view, 2 rooms"


def test_tags_and_attributes_are_removed():
    assert strip_markup('<b onclick="x()">Bold</b> <a href="http://e.vil">link</a>') == "Bold link"


def test_script_content_is_dropped():
    assert strip_markup("<script>alert('xss')</script>Hello") == "Hello"


def test_empty_values_pass_through():
    assert strip_markup("") == ""
    assert strip_markup(None) is None
