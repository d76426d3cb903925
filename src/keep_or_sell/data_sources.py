from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .schemas import Confidence, ListingExtract, RentRange, RentSource
from .verdict import DEFAULT_CITY

logger = logging.getLogger(__name__)

RESIDENCE_TYPES = ("House", "SingleFamilyResidence")
CITY_PATTERN = re.compile(r",\s*([^,]+),\s*BC", re.IGNORECASE)
AMOUNT_PATTERN = re.compile(r"[0-9][0-9,]*(?:\.[0-9]+)?")


class ListingExtractionError(RuntimeError):
    """Raised when a listing page cannot be turned into input fields."""


class ListingClient:
    """Fetch listing pages and pre-fill calculator inputs from them."""

    DEFAULT_HEADERS = {
        "User-Agent": "Mozilla/5.0 (compatible; keep-or-sell/0.1)",
        "Accept": "text/html,application/xhtml+xml",
    }

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_html(self, url: str) -> str:
        logger.info("Fetching listing page %s", url)
        response = self.session.get(url, headers=self.DEFAULT_HEADERS, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def extract(self, url: str) -> ListingExtract:
        return extract_listing(self.fetch_html(url))


def extract_listing(html: str) -> ListingExtract:
    """
    Heuristically read listing details out of raw page markup.

    Strategies are tried in order: the ``__NEXT_DATA__`` payload, the first
    JSON-LD block, then ``data-cy`` tagged elements. Every field carries a
    confidence level; values are suggestions the user can still edit.
    """
    if not html or not html.strip():
        raise ListingExtractionError("Missing listing markup")

    soup = BeautifulSoup(html, "html.parser")
    parsed = _from_next_data(soup) or _from_ld_json(soup) or _from_data_attributes(soup)

    address = parsed.get("address", "")
    bedrooms = parsed.get("bedrooms", 0.0)
    bathrooms = parsed.get("bathrooms", 0.0)
    sqft = parsed.get("sqft", 0.0)
    price = parsed.get("price", 0.0)

    return ListingExtract(
        address=address,
        city=parsed.get("city") or DEFAULT_CITY,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        sqft=sqft,
        price=price,
        hoa=0.0,
        property_tax_annual=parsed.get("property_tax_annual", 0.0),
        rent_range=RentRange(
            low=0.0, median=0.0, high=0.0, source=RentSource.PROVIDER_ESTIMATE
        ),
        confidence={
            "address": _found(address, Confidence.MEDIUM),
            "bedrooms": _found(bedrooms, Confidence.MEDIUM),
            "bathrooms": _found(bathrooms, Confidence.MEDIUM),
            "sqft": _found(sqft, Confidence.MEDIUM),
            "price": _found(price, Confidence.HIGH),
            "hoa": Confidence.LOW,
            "rent_range": Confidence.LOW,
        },
    )


def parse_number(value: Any) -> float:
    if value in (None, ""):
        return 0.0
    normalized = re.sub(r"[^0-9.]", "", str(value))
    try:
        return float(normalized)
    except ValueError:
        return 0.0


def _found(value: Any, level: Confidence) -> Confidence:
    return level if value else Confidence.LOW


def _script_json(tag: Optional[Tag]) -> Any:
    if tag is None:
        return None
    raw = tag.string or tag.get_text()
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.debug("Ignoring malformed JSON script: %s", exc)
        return None


def _from_next_data(soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
    payload = _script_json(soup.find("script", id="__NEXT_DATA__"))
    if not isinstance(payload, dict):
        return None
    try:
        listing = payload["props"]["pageProps"]["dehydratedState"]["queries"][0][
            "state"
        ]["data"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(listing, dict) or not listing:
        return None

    sqft = listing.get("sqFtRaw")
    if sqft is None:
        sqft = listing.get("sqFtSearch")
    list_price = listing.get("listPrice")
    if list_price is None:
        list_price = listing.get("marketPrice")
    return {
        "address": listing.get("address") or listing.get("mlsAddress") or "",
        "city": listing.get("city") or listing.get("mlsCity") or "",
        "bedrooms": parse_number(listing.get("beds")),
        "bathrooms": parse_number(listing.get("baths")),
        "sqft": parse_number(sqft),
        "price": parse_number(list_price),
        "property_tax_annual": parse_number(listing.get("taxAmount")),
    }


def _from_ld_json(soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
    payload = _script_json(soup.find("script", attrs={"type": "application/ld+json"}))
    if not isinstance(payload, dict):
        return None

    graph = payload.get("@graph")
    nodes = graph if isinstance(graph, list) else [payload]
    nodes = [node for node in nodes if isinstance(node, dict)]
    product = next((n for n in nodes if n.get("@type") == "Product"), {})
    residence = next((n for n in nodes if n.get("@type") in RESIDENCE_TYPES), {})
    offer = product.get("offers") if isinstance(product.get("offers"), dict) else {}
    address = residence.get("address") if isinstance(residence.get("address"), dict) else {}
    floor_size = (
        residence.get("floorSize") if isinstance(residence.get("floorSize"), dict) else {}
    )

    return {
        "address": address.get("streetAddress") or product.get("name") or "",
        "city": address.get("addressLocality") or "",
        "bedrooms": parse_number(residence.get("numberOfBedrooms")),
        "bathrooms": parse_number(residence.get("numberOfBathroomsTotal")),
        "sqft": parse_number(floor_size.get("value")),
        "price": parse_number(offer.get("price")),
        "property_tax_annual": 0.0,
    }


def _from_data_attributes(soup: BeautifulSoup) -> Dict[str, Any]:
    address = _tagged_text(soup, "property-address")
    match = CITY_PATTERN.search(address)
    return {
        "address": address,
        "city": match.group(1).strip() if match else "",
        "bedrooms": parse_number(_tagged_text(soup, "property-beds")),
        "bathrooms": parse_number(_tagged_text(soup, "property-baths")),
        "sqft": parse_number(_tagged_text(soup, "property-sqft")),
        "price": parse_number(_tagged_text(soup, "property-price", inner_span=False)),
        "property_tax_annual": parse_number(_property_tax_text(soup)),
    }


def _tagged_text(soup: BeautifulSoup, name: str, *, inner_span: bool = True) -> str:
    tag = soup.find(attrs={"data-cy": name})
    if not isinstance(tag, Tag):
        return ""
    if inner_span:
        span = tag.find("span")
        if not isinstance(span, Tag):
            return ""
        return span.get_text(strip=True)
    match = AMOUNT_PATTERN.search(tag.get_text(" ", strip=True))
    return match.group(0) if match else ""


def _property_tax_text(soup: BeautifulSoup) -> str:
    heading = soup.find("h4", string=re.compile(r"Property Tax", re.IGNORECASE))
    if not isinstance(heading, Tag):
        return ""
    for span in heading.find_next_siblings("span"):
        text = span.get_text(strip=True)
        if "$" in text:
            return text
    return ""
