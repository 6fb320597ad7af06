"""Parse free-text 'SKU quantity' lines into line items."""

import re
from typing import Iterable, Optional

from stock_intake.models.intake import LineItem

_WHITESPACE = re.compile(r"\s+")
_INTEGER = re.compile(r"[+-]?\d+")


def parse_line_items(text: Optional[str]) -> list[LineItem]:
    """Parse one 'SKU quantity' entry per line.

    Blank lines are skipped. Malformed lines are dropped rather than reported:
    fewer than two tokens, a non-integer second token, a quantity <= 0, or an
    empty SKU. Duplicate SKUs are kept as separate items in input order.

    Returns an empty list when nothing valid was entered; callers decide how to
    surface that to the user.
    """
    if not text or not text.strip():
        return []

    items: list[LineItem] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        item = _parse_line(stripped)
        if item is not None:
            items.append(item)
    return items


def _parse_line(line: str) -> Optional[LineItem]:
    parts = _WHITESPACE.split(line)
    if len(parts) < 2:
        return None
    sku = parts[0].strip()
    quantity = _to_positive_int(parts[1])
    if not sku or quantity is None:
        return None
    return LineItem(sku=sku, quantity=quantity)


def _to_positive_int(token: str) -> Optional[int]:
    """Return the token as an int when it is a whole number > 0."""
    if not _INTEGER.fullmatch(token):
        return None
    value = int(token)
    return value if value > 0 else None


def normalize_sku_input(text: str) -> str:
    """Upper-case the SKU token of every line, keeping blank lines and the rest of each line.

    Lines with two or more tokens are rejoined with single spaces.
    """
    if not text.strip():
        return text

    out = []
    for line in text.split("\n"):
        if not line.strip():
            out.append(line)
            continue
        parts = _WHITESPACE.split(line.strip())
        if len(parts) >= 2:
            out.append(f"{parts[0].upper()} {' '.join(parts[1:])}")
        else:
            out.append(parts[0].upper())
    return "\n".join(out)


def serialize_line_items(items: Iterable[LineItem]) -> str:
    """Render items back to the 'SKU quantity' text form, one per line."""
    return "\n".join(f"{item.sku} {item.quantity}" for item in items)
