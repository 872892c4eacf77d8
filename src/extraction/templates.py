# src/extraction/templates.py

"""Hostname-scoped CSS selector templates for DOM price extraction.

Retailer markup is heterogeneous and unversioned, so selectors live in
``price_templates.json`` rather than in code: each lowercase hostname
maps to an ordered list of templates, and the ``__defaults__`` list is
appended after every hostname's own entries. Supporting a new store
means adding a JSON entry.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from src.config.settings import Settings
from src.extraction.price_text import guess_currency, normalize_price_text
from src.models.rendered_page import RenderedPage
from src.models.scrape_result import ExtractedPrice

logger = logging.getLogger("price_observer.templates")


@dataclass(frozen=True)
class PriceTemplate:
    """A named, ordered set of selectors for one storefront layout."""

    name: str
    selectors: tuple[str, ...]
    locale: str = Settings.DEFAULT_LOCALE
    read_attr_if_meta: str | None = None


@dataclass
class TemplateTable:
    """Hostname → templates mapping plus the shared default tier."""

    by_host: dict[str, list[PriceTemplate]] = field(
        default_factory=lambda: dict[str, list[PriceTemplate]]()
    )
    defaults: list[PriceTemplate] = field(
        default_factory=lambda: list[PriceTemplate]()
    )

    def candidates(self, hostname: str) -> list[PriceTemplate]:
        """Hostname-specific templates first, then the defaults."""
        host_templates = self.by_host.get(hostname.lower(), [])
        return [*host_templates, *self.defaults]


def _parse_template(entry: dict[str, Any]) -> PriceTemplate:
    return PriceTemplate(
        name=str(entry["name"]),
        selectors=tuple(str(s) for s in entry.get("selectors", [])),
        locale=str(entry.get("locale", Settings.DEFAULT_LOCALE)),
        read_attr_if_meta=entry.get("readAttrIfMeta"),
    )


def load_templates(path: Path | None = None) -> TemplateTable:
    """Load the template table from JSON on disk."""
    source = path or Settings.TEMPLATES_PATH
    with open(source, encoding="utf-8") as f:
        raw: dict[str, list[dict[str, Any]]] = json.load(f)

    table = TemplateTable()
    for key, entries in raw.items():
        templates = [_parse_template(e) for e in entries]
        if key == Settings.DEFAULT_TEMPLATES_KEY:
            table.defaults = templates
        else:
            table.by_host[key.lower()] = templates

    logger.debug(
        "Loaded %d host template sets and %d defaults from %s",
        len(table.by_host),
        len(table.defaults),
        source,
    )
    return table


def _read_candidate(
    element: Tag, template: PriceTemplate,
) -> str:
    """Raw price text for an element: meta attribute or visible text."""
    if template.read_attr_if_meta and element.name == "meta":
        value = element.get(template.read_attr_if_meta)
        if isinstance(value, list):
            value = " ".join(value)
        return (value or "").strip()
    return element.get_text(strip=True)


def extract_with_templates(
    page: RenderedPage,
    hostname: str,
    table: TemplateTable | None = None,
) -> ExtractedPrice | None:
    """Try every candidate template in order; first parsed price wins."""
    templates = table or load_templates()

    for template in templates.candidates(hostname):
        for selector in template.selectors:
            try:
                element = page.soup.select_one(selector)
            except SelectorSyntaxError:
                logger.warning(
                    "Template '%s' has invalid selector %r, skipping",
                    template.name,
                    selector,
                )
                continue
            if element is None:
                continue

            text = _read_candidate(element, template)
            if not text:
                continue

            price = normalize_price_text(text, template.locale)
            if price is None:
                logger.debug(
                    "Template '%s' selector %r matched unparseable %r",
                    template.name,
                    selector,
                    text,
                )
                continue

            return ExtractedPrice(
                price=price,
                currency=guess_currency(text) or Settings.DEFAULT_CURRENCY,
                source=template.name,
                selector=selector,
            )
    return None
