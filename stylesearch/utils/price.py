"""Display-price parsing for shopping records ("₹1,299.00" -> 1299.0)."""

from __future__ import annotations

import re

# First number in the string. Commas are grouping separators in both the
# western (1,299) and Indian lakh (1,00,000) styles.
_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def extract_price(text: str | None) -> float | None:
    """Return the numeric amount in a price string, or None if there isn't one.

    Currency markers (₹, Rs., INR, $) and trailing text ("onwards", "/month")
    are ignored.
    """
    if not text:
        return None
    match = _PRICE_RE.search(text)
    if match is None:
        return None
    cleaned = match.group(0).replace(",", "")
    try:
        return float(cleaned)
    except ValueError:
        return None
