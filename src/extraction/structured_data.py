# src/extraction/structured_data.py

"""Schema.org offer extraction from embedded JSON-LD blocks."""

import json
import logging
import re
from typing import Any

from src.extraction.price_text import guess_currency, normalize_price_text
from src.models.rendered_page import RenderedPage
from src.models.scrape_result import ExtractedPrice

logger = logging.getLogger("price_observer.structured_data")

_LD_JSON_TYPE = "application/ld+json"

# Concatenated blocks: split on newlines that precede an object/array
_BLOCK_BOUNDARY = re.compile(r"\n(?=\s*[\[{])")

_PRICE_KEYS: tuple[str, ...] = ("price", "lowPrice")


def _parse_block(raw: str) -> list[Any]:
    """Decode one script body into candidate JSON nodes.

    Falls back to a best-effort split-and-reparse when the block holds
    several concatenated documents or trailing garbage.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        candidates: list[Any] = []
        for part in _BLOCK_BOUNDARY.split(raw):
            part = part.strip()
            if not part:
                continue
            try:
                candidates.append(json.loads(part))
            except json.JSONDecodeError:
                logger.debug(
                    "Discarding unparseable JSON-LD fragment (%d chars)",
                    len(part),
                )
        return candidates
    if isinstance(parsed, list):
        return list(parsed)
    return [parsed]


def _offer_price(offer: dict[str, Any]) -> Any:
    for key in _PRICE_KEYS:
        value = offer.get(key)
        if value not in (None, ""):
            return value
    return None


def find_offer(node: Any) -> dict[str, Any] | None:
    """Depth-first search for the first ``offers`` entry under *node*.

    Offer arrays prefer the first element carrying a price.
    """
    if isinstance(node, list):
        for item in node:
            found = find_offer(item)
            if found is not None:
                return found
        return None
    if not isinstance(node, dict):
        return None

    offers = node.get("offers")
    if isinstance(offers, list):
        priced = [
            o for o in offers
            if isinstance(o, dict) and _offer_price(o) is not None
        ]
        if priced:
            return priced[0]
        if offers and isinstance(offers[0], dict):
            return offers[0]
    elif isinstance(offers, dict):
        return offers

    for value in node.values():
        found = find_offer(value)
        if found is not None:
            return found
    return None


def extract_from_structured_data(
    page: RenderedPage,
) -> ExtractedPrice | None:
    """Return the first JSON-LD offer price on the page, or ``None``."""
    for script in page.soup.find_all("script", type=_LD_JSON_TYPE):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue

        for candidate in _parse_block(raw):
            offer = find_offer(candidate)
            if offer is None:
                continue
            raw_price = _offer_price(offer)
            if raw_price is None:
                continue
            price = normalize_price_text(str(raw_price))
            if price is None:
                logger.debug(
                    "JSON-LD offer price %r did not normalise", raw_price,
                )
                continue
            currency = offer.get("priceCurrency") or guess_currency(
                str(raw_price)
            )
            return ExtractedPrice(
                price=price,
                currency=str(currency) if currency else None,
                source="json-ld",
            )
    return None
