from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from restbucks.client.discovery import LinkDiscoverer, LinkNotFoundError

DOCUMENT = {
    "status": "Payment expected",
    "_links": {
        "self": {"href": "http://shop/orders/1"},
        "restbucks:payment": [
            {"href": "http://shop/orders/1/payment"},
            {"href": "http://shop/orders/1/payment-alt"},
        ],
        "restbucks:cancel": {"title": "no href"},
        "curies": [{"href": "http://shop/docs/{rel}", "name": "restbucks", "templated": True}],
    },
}


def test_find_link_returns_href() -> None:
    assert LinkDiscoverer().find_link(DOCUMENT, "self") == "http://shop/orders/1"


def test_find_link_takes_first_of_many() -> None:
    assert LinkDiscoverer().find_link(DOCUMENT, "restbucks:payment") == "http://shop/orders/1/payment"


def test_link_without_href_is_absent() -> None:
    discoverer = LinkDiscoverer()

    assert discoverer.find_link(DOCUMENT, "restbucks:cancel") is None
    assert not discoverer.has_link(DOCUMENT, "restbucks:cancel")


def test_find_required_link_raises_for_missing_relation() -> None:
    with pytest.raises(LinkNotFoundError, match="restbucks:receipt"):
        LinkDiscoverer().find_required_link(DOCUMENT, "restbucks:receipt")


def test_relations_ignore_curies() -> None:
    assert LinkDiscoverer().relations(DOCUMENT) == {"self", "restbucks:payment", "restbucks:cancel"}


def test_document_without_links() -> None:
    discoverer = LinkDiscoverer()

    assert discoverer.relations({}) == set()
    assert discoverer.find_link({"_links": []}, "self") is None
