"""Slug parsing: ``GiftName-123`` and free-form gift names."""

from __future__ import annotations

import re

from ..errors import MalformedSlug

_SERIAL_RE = re.compile(r"[0-9]+")
_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]+")


def parse_gift_slug(slug: str) -> tuple[str, int]:
    """Split ``slug`` at its last hyphen into (gift slug, serial number).

    >>> parse_gift_slug("PlushPepe-42")
    ('PlushPepe', 42)
    """
    slug = slug.strip()
    gift, sep, serial = slug.rpartition("-")
    if not sep or not gift or not serial:
        raise MalformedSlug(slug)
    if not _SERIAL_RE.fullmatch(serial):
        raise MalformedSlug(slug)
    number = int(serial)
    if number <= 0:
        raise MalformedSlug(slug)
    return gift, number


def gift_to_slug(name_or_slug: str) -> str:
    """Keep only ASCII letters and digits: ``"Kissed Frog"`` -> ``"KissedFrog"``."""
    return _NON_ALNUM_RE.sub("", name_or_slug.strip())


def supply_cache_key(slug_base: str) -> str:
    return f"gift:{slug_base}"
