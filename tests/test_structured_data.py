# tests/test_structured_data.py

"""Tests for JSON-LD offer extraction."""

import json
import unittest

from src.extraction.structured_data import (
    extract_from_structured_data,
    find_offer,
)
from src.models.rendered_page import RenderedPage


def _page(*blocks: str, body: str = "") -> RenderedPage:
    """Wrap raw JSON-LD script bodies in a minimal HTML page."""
    scripts = "".join(
        f'<script type="application/ld+json">{b}</script>'
        for b in blocks
    )
    return RenderedPage(
        url="https://example.cl/p/1",
        html=f"<html><head>{scripts}</head><body>{body}</body></html>",
    )


PRODUCT = {
    "@context": "https://schema.org",
    "@type": "Product",
    "name": "Catan",
    "offers": {
        "@type": "Offer",
        "price": "34990",
        "priceCurrency": "CLP",
    },
}


class TestFindOffer(unittest.TestCase):
    """Recursive offer lookup."""

    def test_direct_offer_object(self) -> None:
        """A top-level offers dict is returned as-is."""
        self.assertEqual(find_offer(PRODUCT)["price"], "34990")

    def test_offer_array_prefers_priced(self) -> None:
        """The first offer carrying a price wins."""
        node = {"offers": [{"availability": "x"}, {"price": 10}]}
        self.assertEqual(find_offer(node), {"price": 10})

    def test_offer_array_without_prices(self) -> None:
        """With no priced offers the first entry is returned."""
        node = {"offers": [{"availability": "x"}]}
        self.assertEqual(find_offer(node), {"availability": "x"})

    def test_nested_graph(self) -> None:
        """Offers nested under @graph are found."""
        node = {"@graph": [{"@type": "WebPage"}, PRODUCT]}
        self.assertEqual(find_offer(node)["priceCurrency"], "CLP")

    def test_scalar_returns_none(self) -> None:
        """Non-container nodes have no offers."""
        self.assertIsNone(find_offer("text"))
        self.assertIsNone(find_offer({"name": "x"}))


class TestExtractFromStructuredData(unittest.TestCase):
    """Page-level JSON-LD extraction."""

    def test_simple_product(self) -> None:
        """A Product block yields its offer price and currency."""
        result = extract_from_structured_data(_page(json.dumps(PRODUCT)))
        self.assertIsNotNone(result)
        assert result is not None
        self.assertEqual(result.price, 34990)
        self.assertEqual(result.currency, "CLP")
        self.assertEqual(result.source, "json-ld")

    def test_array_of_objects(self) -> None:
        """A block holding an array is scanned element by element."""
        block = json.dumps([{"@type": "Organization"}, PRODUCT])
        result = extract_from_structured_data(_page(block))
        assert result is not None
        self.assertEqual(result.price, 34990)

    def test_skips_blocks_without_offers(self) -> None:
        """Earlier offer-less blocks fall through to later ones."""
        org = json.dumps({"@type": "Organization", "name": "Shop"})
        result = extract_from_structured_data(
            _page(org, json.dumps(PRODUCT))
        )
        assert result is not None
        self.assertEqual(result.price, 34990)

    def test_concatenated_blocks_are_split(self) -> None:
        """Two documents in one script are re-parsed separately."""
        org = json.dumps({"@type": "Organization"})
        raw = f"{org}\n{json.dumps(PRODUCT)}"
        result = extract_from_structured_data(_page(raw))
        assert result is not None
        self.assertEqual(result.price, 34990)

    def test_malformed_block_returns_none(self) -> None:
        """Unparseable JSON never raises."""
        self.assertIsNone(
            extract_from_structured_data(_page("{not json"))
        )

    def test_numeric_price_and_missing_currency(self) -> None:
        """Numeric prices work and currency may be absent."""
        product = {"offers": {"price": 19990}}
        result = extract_from_structured_data(
            _page(json.dumps(product))
        )
        assert result is not None
        self.assertEqual(result.price, 19990)
        self.assertIsNone(result.currency)

    def test_aggregate_offer_low_price(self) -> None:
        """AggregateOffer lowPrice is used when price is absent."""
        product = {
            "offers": {
                "@type": "AggregateOffer",
                "lowPrice": "12.990",
                "priceCurrency": "CLP",
            }
        }
        result = extract_from_structured_data(
            _page(json.dumps(product))
        )
        assert result is not None
        self.assertEqual(result.price, 12990)

    def test_unparseable_price_falls_through(self) -> None:
        """A junk price in one block lets a later block win."""
        junk = json.dumps({"offers": {"price": "consultar"}})
        result = extract_from_structured_data(
            _page(junk, json.dumps(PRODUCT))
        )
        assert result is not None
        self.assertEqual(result.price, 34990)

    def test_no_blocks(self) -> None:
        """A page without JSON-LD yields None."""
        self.assertIsNone(
            extract_from_structured_data(
                _page(body='<span class="price">$1.000</span>')
            )
        )


if __name__ == "__main__":
    unittest.main()
