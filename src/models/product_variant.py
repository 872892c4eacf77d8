# src/models/product_variant.py

"""Sellable SKU reference owned by the catalog."""

from dataclasses import dataclass


@dataclass
class ProductVariant:
    """A specific edition/language/condition of a product."""

    id: str
    product_name: str = ""
    label: str = ""
