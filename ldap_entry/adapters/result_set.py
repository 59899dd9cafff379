import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class RawEntry:
    """
    Entry handle over one raw search response item.

    Wraps an ldap3 response dictionary (``dn``, ``attributes``,
    ``raw_attributes``). Attribute lookups are case-insensitive, as attribute
    names are in LDAP.
    """

    def __init__(self, response: Dict[str, Any], position: int = 0):
        self.response = response
        self.position = position

    @property
    def dn(self) -> str:
        return self.response.get("dn", "")

    def _raw(self) -> Dict[str, Any]:
        return self.response.get("raw_attributes") or {}

    def _decoded(self) -> Dict[str, Any]:
        return self.response.get("attributes") or {}

    def attribute_names(self) -> List[str]:
        """Attribute names in server order."""
        return list(self._raw() or self._decoded())

    @staticmethod
    def _lookup(mapping: Dict[str, Any], name: str) -> Optional[Any]:
        if name in mapping:
            return mapping[name]
        lowered = name.lower()
        for key, value in mapping.items():
            if key.lower() == lowered:
                return value
        return None

    def binary_values(self, name: str) -> List[bytes]:
        """Values of an attribute as opaque byte strings."""
        values = self._lookup(self._raw(), name)
        if values is None:
            values = self._lookup(self._decoded(), name)
        if values is None:
            return []
        if not isinstance(values, (list, tuple)):
            values = [values]
        return [v if isinstance(v, bytes) else str(v).encode("utf-8") for v in values]

    def values(self, name: str) -> List[str]:
        """Values of an attribute as text."""
        return [v.decode("utf-8", errors="replace") for v in self.binary_values(name)]

    def first_value(self, name: str) -> str:
        values = self.values(name)
        return values[0] if values else ""

    def __repr__(self) -> str:
        return f"RawEntry(dn='{self.dn}', position={self.position})"


class ResultSet:
    """
    Result handle for one search.

    Holds the raw entries returned by the server and hands out entry handles
    one at a time. Sorting reorders the entries in place.
    """

    def __init__(self, responses: Optional[Iterable[Dict[str, Any]]] = None):
        self._entries: List[Dict[str, Any]] = [
            response
            for response in (responses or [])
            if response.get("type", "searchResEntry") == "searchResEntry"
        ]
        self.released = False

    def _entry_at(self, position: int) -> Optional[RawEntry]:
        if self.released or position >= len(self._entries):
            return None
        return RawEntry(self._entries[position], position)

    def first_entry(self) -> Optional[RawEntry]:
        return self._entry_at(0)

    def next_entry(self, entry: RawEntry) -> Optional[RawEntry]:
        return self._entry_at(entry.position + 1)

    def count(self) -> int:
        return len(self._entries)

    def sort(self, attribute: str) -> None:
        """
        Stable sort of the entries by the first value of one attribute.

        Entries without the attribute sort first.
        """
        logger.debug(f"Sorting {len(self._entries)} entries by '{attribute}'")
        self._entries.sort(key=lambda response: RawEntry(response).first_value(attribute))

    def release(self) -> None:
        """Drop the held entries; the handle yields nothing afterwards."""
        self._entries = []
        self.released = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def __len__(self) -> int:
        return self.count()
