"""Parser for the public Telegram collectible page (https://t.me/nft/<slug>).

Field precedence:
  1. ``<tr><th>Label</th><td>value</td></tr>`` rows (Owner/Model/Backdrop/Symbol/Quantity)
  2. og:title meta for the display title ("Kissed Frog #3639" -> "Kissed Frog")
  3. twitter:description (or og:description) "Model: ..." lines, only for
     traits the table left empty
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from ..errors import MalformedSlug
from ..resolver.slugs import parse_gift_slug
from ..schemas import ResolvedItem

logger = logging.getLogger(__name__)

_RARITY_RE = re.compile(r"\s+\d+(\.\d+)?%$")
_NON_DIGIT_RE = re.compile(r"[^0-9]")

_DESCRIPTION_PREFIXES = {
    "Model:": "model",
    "Backdrop:": "backdrop",
    "Symbol:": "pattern",
}


def strip_rarity(value: str) -> str:
    """Drop a trailing " 1.5%" rarity label: ``"Gold 5.5%"`` -> ``"Gold"``."""
    value = value.strip()
    if not value:
        return value
    return _RARITY_RE.sub("", value).strip()


def parse_quantity(raw: str) -> tuple[int, int]:
    """Parse ``"14 046/14 278 issued"`` into (issued, total); (0, 0) if malformed."""
    parts = raw.split("/")
    if len(parts) < 2:
        return 0, 0
    return _digits_to_int(parts[0]), _digits_to_int(parts[1])


def _digits_to_int(s: str) -> int:
    digits = _NON_DIGIT_RE.sub("", s)
    return int(digits) if digits else 0


def clean_title(raw: str) -> str:
    if "#" in raw[1:]:
        raw = raw[:raw.rindex("#")]
    return " ".join(raw.split())


class NftPageParser:
    """Extract a ResolvedItem from one collectible page."""

    def parse(self, html: str, slug: str) -> ResolvedItem | None:
        """Return the extracted item, or None if the page carries no traits or counts."""
        try:
            gift, number = parse_gift_slug(slug)
        except MalformedSlug:
            logger.warning("Refusing to parse page for malformed slug %r", slug)
            return None

        soup = BeautifulSoup(html, "lxml")
        rows = self._table_rows(soup)

        fields = {
            "owner": rows.get("Owner", ""),
            "model": strip_rarity(rows.get("Model", "")),
            "backdrop": strip_rarity(rows.get("Backdrop", "")),
            "pattern": strip_rarity(rows.get("Symbol", "")),
        }
        issued, total = parse_quantity(rows.get("Quantity", ""))

        title = clean_title(self._meta(soup, property="og:title"))
        if title:
            gift = title

        if not (fields["model"] and fields["backdrop"] and fields["pattern"]):
            desc = self._meta(soup, name="twitter:description") or self._meta(
                soup, property="og:description"
            )
            for key, value in self._parse_description(desc).items():
                if not fields[key]:
                    fields[key] = value

        item = ResolvedItem(
            slug=slug,
            gift_title=gift,
            serial_number=number,
            issued_count=issued,
            total_supply=total,
            **fields,
        )
        if not item.is_present:
            return None
        return item

    @staticmethod
    def _table_rows(soup: BeautifulSoup) -> dict[str, str]:
        # First row per label wins; later duplicates are ignored.
        rows: dict[str, str] = {}
        for tr in soup.find_all("tr"):
            th = tr.find("th")
            td = tr.find("td")
            if not isinstance(th, Tag) or not isinstance(td, Tag):
                continue
            label = th.get_text(strip=True)
            if label and label not in rows:
                rows[label] = td.get_text().strip()
        return rows

    @staticmethod
    def _meta(soup: BeautifulSoup, **attrs: str) -> str:
        tag = soup.find("meta", attrs=attrs)
        if not isinstance(tag, Tag):
            return ""
        content = tag.get("content")
        return content.strip() if isinstance(content, str) else ""

    @staticmethod
    def _parse_description(desc: str) -> dict[str, str]:
        found: dict[str, str] = {}
        for line in desc.splitlines():
            line = line.strip()
            for prefix, key in _DESCRIPTION_PREFIXES.items():
                if line.startswith(prefix) and key not in found:
                    value = strip_rarity(line[len(prefix):])
                    if value:
                        found[key] = value
        return found
