from typing import Optional

from bs4 import BeautifulSoup

# Содержимое этих тегов выбрасывается целиком, а не превращается в текст
DISCARDED_TAGS = ["script", "style", "textarea", "option", "noscript"]


def strip_markup(value: Optional[str]) -> Optional[str]:
    """Удаляет всю разметку: ни одного тега, ни одного атрибута"""
    if not value:
        return value

    soup = BeautifulSoup(value, "lxml")
    for tag in soup(DISCARDED_TAGS):
        tag.decompose()
    return soup.get_text()
