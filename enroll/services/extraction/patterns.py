"""
Tag patterns for pulling single values out of known HTML pages.

Pages are parsed with BeautifulSoup's html.parser backend, so attribute
order, quoting style, letter case of names and incidental whitespace do not
matter. A TagPattern picks the first element whose name, attributes and
(optionally) text match. Malformed input never raises; it just does not
match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from bs4.element import Tag

if TYPE_CHECKING:
    from .pages import PageShape

_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse runs of whitespace and strip the ends."""
    return _WS_RE.sub(" ", text).strip()


def parse_page(body: str) -> BeautifulSoup:
    return BeautifulSoup(body, "html.parser")


def _attr_value(el: Tag, name: str) -> str | None:
    value = el.get(name)
    if isinstance(value, list):
        # Multi-valued attributes such as class
        return " ".join(value)
    return value


@dataclass(frozen=True)
class TagPattern:
    """
    Matches the first <tag> with the given attributes.

    Attributes:
        tag: Tag name (case-insensitive)
        where: Attribute values the tag must carry (exact, after unescaping)
        attr: Attribute to yield; None yields the element's text
        text: Required element text (whitespace-collapsed), e.g. an option label
    """

    tag: str
    where: dict[str, str] = field(default_factory=dict)
    attr: str | None = None
    text: str | None = None

    def _matches(self, el: Tag) -> bool:
        if any(_attr_value(el, k.lower()) != v for k, v in self.where.items()):
            return False
        if self.text is not None:
            return normalize_text(el.get_text(" ")) == normalize_text(self.text)
        return True

    def search(self, page: BeautifulSoup) -> str | None:
        """Return the first matching value in a parsed page, or None."""
        for el in page.find_all(self.tag.lower()):
            if not self._matches(el):
                continue

            if self.attr is None:
                value = normalize_text(el.get_text(" "))
            else:
                value = (_attr_value(el, self.attr.lower()) or "").strip()
            if value:
                return value
        return None

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        conds = " ".join(f'{k}="{v}"' for k, v in self.where.items())
        target = f"@{self.attr}" if self.attr else "text"
        head = f"<{self.tag} {conds}>" if conds else f"<{self.tag}>"
        if self.text is not None:
            head += f"{self.text}</{self.tag}>"
        return f"{head} {target}"


class Extractor:
    """Applies tag patterns to response bodies."""

    def extract(self, pattern: TagPattern, body: str | None) -> tuple[str, bool]:
        """
        Extract the first value matching pattern.

        Returns:
            (value, found). value is "" when found is False.
        """
        if not body:
            return "", False
        return self._extract_from(pattern, parse_page(body))

    def _extract_from(self, pattern: TagPattern, page: BeautifulSoup) -> tuple[str, bool]:
        value = pattern.search(page)
        if value is None:
            return "", False
        return value, True

    def extract_page(self, shape: PageShape, body: str | None) -> tuple[dict[str, str], list[str]]:
        """
        Extract every field of a PageShape.

        Returns:
            (values, missing): values for the fields that matched and the
            names of those that did not, in declaration order.
        """
        page = parse_page(body or "")
        values: dict[str, str] = {}
        missing: list[str] = []
        for name, pattern in shape.fields.items():
            value, found = self._extract_from(pattern, page)
            if found:
                values[name] = value
            else:
                missing.append(name)
        return values, missing
