import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from ..exceptions import LDAPOperationError
from ..utils import dn as dn_utils
from ..utils.values import collapse_values, expand_values, read_entry
from .entry import Entry

logger = logging.getLogger(__name__)

ROLE_SOURCE_ATTRIBUTE = "nsRole"
ROLE_FILTER = "(objectClass=*)"


def resolve_roles(transport, data: Dict[str, Any]) -> List[Any]:
    """
    Resolve the nsRole DNs of an entry into role common names.

    Each listed role costs one base-scope lookup requesting only ``cn``.

    Args:
        transport: Transport used for the follow-up lookups
        data: Attribute data of the entry carrying nsRole

    Returns:
        List: The cn of every role, in nsRole order

    Raises:
        LDAPOperationError: If a role object cannot be read
    """
    roles = []
    for role_dn in expand_values(data.get(ROLE_SOURCE_ATTRIBUTE)):
        if isinstance(role_dn, bytes):
            role_dn = role_dn.decode("utf-8")
        result = transport.read_one(role_dn, ROLE_FILTER, ["cn"]).raise_for_error()
        with result.result_set as role_results:
            role_entry = role_results.first_entry()
            if role_entry is None:
                raise LDAPOperationError(f"Role {role_dn} not found", 32)
            roles.append(collapse_values(role_entry.values("cn")))
    logger.debug(f"Resolved {len(roles)} roles")
    return roles


def build_data(transport, raw_entry, binary_fields: Iterable[str]) -> Dict[str, Any]:
    """Read a raw entry into a data mapping, resolving roles when nsRole is present."""
    data = read_entry(raw_entry, binary_fields)
    if ROLE_SOURCE_ATTRIBUTE in data:
        data["roles"] = resolve_roles(transport, data)
    return data


class SearchResults:
    """
    Forward-only cursor over the entries of one search.

    Entries are read lazily, one per ``next()`` call. The drain helpers
    (``get_all``, ``get_col``, ``get_assoc``) consume the cursor; once it is
    exhausted it stays exhausted and they return empty results.
    """

    def __init__(self, transport, base_dn: str, result_set, binary_fields: Optional[Iterable[str]] = None):
        self.transport = transport
        self.base_dn = base_dn
        self.result_set = result_set
        self.binary_fields = list(binary_fields or [])
        self._entry_id = None
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next(self) -> Optional[Entry]:
        """
        Get the next entry.

        Returns:
            Optional[Entry]: The next entry, or None when no entries are left
        """
        if self._exhausted:
            return None
        if self._entry_id is None:
            self._entry_id = self.result_set.first_entry()
        else:
            self._entry_id = self.result_set.next_entry(self._entry_id)
        if self._entry_id is None:
            self._exhausted = True
            return None

        data = build_data(self.transport, self._entry_id, self.binary_fields)
        dn = self._entry_id.dn
        rdn = dn_utils.relative_name(dn, self.base_dn)
        return Entry(self.transport, rdn, dn, data)

    def __iter__(self) -> Iterator[Entry]:
        while True:
            entry = self.next()
            if entry is None:
                return
            yield entry

    def count(self) -> int:
        """Total number of entries in the result set, regardless of position."""
        return self.result_set.count()

    def __len__(self) -> int:
        return self.count()

    def sort(self, sort_by: Union[str, List[str]]) -> None:
        """
        Sort the results by one attribute or several (highest priority first).

        Multi-key order comes from stable single-key sorts applied from the
        lowest-priority key to the highest.
        """
        if isinstance(sort_by, (list, tuple)):
            for attribute in reversed(sort_by):
                self.result_set.sort(attribute)
        else:
            self.result_set.sort(sort_by)

    def get_all(self, data_only: bool = False, include_dn: bool = True) -> List[Union[Entry, Dict[str, Any]]]:
        """
        Drain the cursor.

        Args:
            data_only: Return attribute mappings instead of Entry objects
            include_dn: With data_only, merge 'rdn' and 'dn' into each mapping

        Returns:
            List of Entry objects or attribute mappings
        """
        results = []
        for entry in self:
            if data_only:
                if include_dn:
                    results.append({"rdn": entry.rdn, "dn": entry.dn, **entry.data})
                else:
                    results.append(entry.data)
            else:
                results.append(entry)
        return results

    def get_col(self, column_name: Optional[str] = None) -> List[Any]:
        """
        Drain the cursor into the values of one attribute.

        Without a column name the first attribute of the first entry is used;
        pass the name explicitly, as attribute order is up to the server.
        """
        results = []
        pick_default = column_name is None
        for entry in self:
            if pick_default:
                column_name = next(iter(entry.data), None)
                pick_default = False
            results.append(entry.data.get(column_name))
        return results

    def get_assoc(self, id_column_name: Optional[str] = None, value_column_name: Optional[str] = None) -> Dict[Any, Any]:
        """
        Drain the cursor into a mapping of one attribute's value to another's.

        Without column names the first and second attributes of the first entry
        are used. Later entries overwrite earlier ones on duplicate keys.
        """
        results = {}
        pick_id, pick_value = id_column_name is None, value_column_name is None
        for entry in self:
            if pick_id or pick_value:
                keys = list(entry.data)
                if pick_id:
                    id_column_name = keys[0] if keys else None
                if pick_value:
                    value_column_name = keys[1] if len(keys) > 1 else None
                pick_id = pick_value = False
            key = entry.data.get(id_column_name)
            if isinstance(key, list):
                key = tuple(key)
            results[key] = entry.data.get(value_column_name)
        return results

    def to_dataframe(self, include_dn: bool = True):
        """
        Drain the cursor into a pandas DataFrame, one row per entry.

        Requires the optional pandas dependency (``pip install ldap-entry-client[dataframe]``).
        """
        import pandas as pd

        return pd.DataFrame(self.get_all(data_only=True, include_dn=include_dn))

    def release(self) -> None:
        """Release the underlying result set; the cursor is exhausted afterwards."""
        self.result_set.release()
        self._exhausted = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
