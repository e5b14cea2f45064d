from __future__ import annotations

from typing import Any, Mapping


class LinkNotFoundError(Exception):
    pass


class LinkDiscoverer:
    """Looks up links by relation in a HAL document.

    A relation may carry a single link object or an array of them; for an
    array the first entry wins.
    """

    def __init__(self, links_key: str = "_links") -> None:
        self._links_key = links_key

    def relations(self, document: Mapping[str, Any]) -> set[str]:
        links = document.get(self._links_key)
        if not isinstance(links, Mapping):
            return set()
        return {rel for rel in links if rel != "curies"}

    def find_link(self, document: Mapping[str, Any], rel: str) -> str | None:
        links = document.get(self._links_key)
        if not isinstance(links, Mapping):
            return None

        value = links.get(rel)
        if isinstance(value, list):
            value = value[0] if value else None
        if not isinstance(value, Mapping):
            return None

        href = value.get("href")
        return href if isinstance(href, str) and href else None

    def find_required_link(self, document: Mapping[str, Any], rel: str) -> str:
        href = self.find_link(document, rel)
        if href is None:
            raise LinkNotFoundError(f"no link with relation {rel!r}")
        return href

    def has_link(self, document: Mapping[str, Any], rel: str) -> bool:
        return self.find_link(document, rel) is not None
