# src/extraction/price_text.py

"""Locale-ambiguous price string normalisation.

Storefront prices arrive formatted for humans: ``$47.990`` in Chile,
``29,990`` on some US-styled themes, ``1.234,56`` on EU ones. This
module turns them into plain numbers without ever raising, so callers
can treat ``None`` as "no price here, try the next selector".
"""

import re

from src.config.settings import Settings

_NON_PRICE_CHARS = re.compile(r"[^\d.,\s]")
_DOT_THOUSANDS = re.compile(r"\.\d{3}(?!\d)")
_COMMA_THOUSANDS = re.compile(r",\d{3}(?!\d)")
_DECIMAL_TAIL = re.compile(r"\s*\d{1,2}\s*")
_USD_MARKERS = re.compile(r"USD|US\$")
_FLOAT_EXPONENT = re.compile(r"\d+(?:\.\d+)?[eE][+-]?\d+")


def normalize_price_text(
    raw_text: str | None,
    locale: str = Settings.DEFAULT_LOCALE,
) -> float | None:
    """Parse a scraped price string into a number.

    Separator rules, applied in order:

    1. ``.`` followed by exactly three digits with no ``,`` anywhere
       is a thousands separator.
    2. ``,`` followed by exactly three digits with no ``.`` anywhere
       is a thousands separator.
    3. Otherwise the last separator, when followed by one or two
       trailing digits, is the decimal mark and the other symbol is
       a thousands separator.
    4. Otherwise every separator is dropped.

    ``locale`` is the locale declared by the extraction template; the
    rules above already cover es-CL, en-US and EU formatting.

    A bare exponent literal such as ``1.2345678901234567e+19`` (what
    ``str()`` gives for very large floats) is parsed as-is so canonical
    output always normalises back to itself.

    Returns ``None`` when nothing numeric survives.
    """
    if not raw_text:
        return None

    text = str(raw_text).replace("\u00a0", " ")
    if _FLOAT_EXPONENT.fullmatch(text.strip()):
        return float(text.strip())
    text = _NON_PRICE_CHARS.sub("", text).strip()

    if _DOT_THOUSANDS.search(text) and "," not in text:
        text = text.replace(".", "")
    elif _COMMA_THOUSANDS.search(text) and "." not in text:
        text = text.replace(",", "")
    else:
        last_sep = max(text.rfind(","), text.rfind("."))
        if last_sep != -1 and _DECIMAL_TAIL.fullmatch(
            text[last_sep + 1:]
        ):
            decimal_sep = text[last_sep]
            thousands_sep = "." if decimal_sep == "," else ","
            text = text.replace(thousands_sep, "")
            text = text.replace(decimal_sep, ".")
        else:
            text = text.replace(".", "").replace(",", "")

    text = re.sub(r"\s+", "", text)
    try:
        return float(text)
    except ValueError:
        return None


def guess_currency(text: str | None) -> str | None:
    """Infer an ISO currency code from price text, or ``None``.

    A bare ``$`` is read as CLP, the deployment's home market.
    """
    if not text:
        return None
    if _USD_MARKERS.search(text):
        return "USD"
    if "€" in text:
        return "EUR"
    if "$" in text:
        return "CLP"
    return None
