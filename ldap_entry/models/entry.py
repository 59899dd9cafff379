import copy
import logging
from typing import Any, Dict, Optional, Tuple

from ..exceptions import LDAPOperationError
from ..utils import dn as dn_utils
from ..utils.values import is_empty

logger = logging.getLogger(__name__)


class Entry:
    """
    A directory object as a mutable, diffable record.

    Callers read and write ``data`` freely; ``update()`` compares it against
    the snapshot taken when the entry was loaded (or last updated) and sends
    the smallest set of modify operations, renaming the entry when its naming
    attribute changed.

    Attributes:
        rdn (str): Name relative to the connection's base DN.
        dn (str): Fully-qualified distinguished name.
        dn_attribute (str): Lower-cased naming attribute of the first DN component.
        data (dict): Attribute name -> value (str/bytes or list of them).
    """

    def __init__(self, transport, rdn: str, dn: str, data: Dict[str, Any]):
        self.transport = transport
        self.rdn = rdn
        self.dn = dn
        self.data = data
        self._old_data = copy.deepcopy(data)
        self.dn_attribute = dn_utils.primary_attribute(dn)

    @property
    def original(self) -> Dict[str, Any]:
        """Copy of the last synced state."""
        return copy.deepcopy(self._old_data)

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.data[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.data

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def delete_attribute(self, attribute_name: str) -> None:
        """
        Delete an attribute on the server right away.

        Not buffered for update(); the attribute is dropped from both the
        live data and the snapshot.

        Raises:
            LDAPOperationError: If the server rejects the delete
        """
        logger.debug(f"Deleting attribute '{attribute_name}' from {self.dn}")
        self.transport.modify_delete(self.dn, {attribute_name: []}).raise_for_error()
        self._old_data.pop(attribute_name, None)
        self.data.pop(attribute_name, None)

    def changes(self) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any], Optional[Any]]:
        """
        Compute the pending diff between ``data`` and the last synced state.

        Keys missing from ``data`` are left alone; only a key explicitly set to
        an empty value (None, '' or []) is deleted.

        Returns:
            tuple: (add, replace, delete, rename_to)
        """
        add, replace, delete = {}, {}, {}
        rename_to = None
        for key, value in self.data.items():
            if key.lower() == self.dn_attribute and value != self._old_data.get(key):
                rename_to = value
            elif key in self._old_data:
                if is_empty(value):
                    delete[key] = []
                elif value != self._old_data[key]:
                    replace[key] = value
            elif not is_empty(value):
                add[key] = value
        return add, replace, delete, rename_to

    def update(self) -> None:
        """
        Commit all changes made to ``data`` since the last sync.

        Adds, replaces and deletes are sent (in that order) against the current
        DN, then a changed naming attribute renames the entry. A failure stops
        the remaining steps; steps already applied are not rolled back.

        Raises:
            LDAPOperationError: If any server operation fails
        """
        add, replace, delete, rename_to = self.changes()
        if isinstance(rename_to, (list, tuple)) and not is_empty(rename_to):
            raise LDAPOperationError(
                f"Naming attribute '{self.dn_attribute}' must have a single value to rename {self.dn}"
            )

        if add:
            logger.debug(f"Adding attributes {list(add)} to {self.dn}")
            self.transport.modify_add(self.dn, add).raise_for_error()
        if replace:
            logger.debug(f"Replacing attributes {list(replace)} on {self.dn}")
            self.transport.modify_replace(self.dn, replace).raise_for_error()
        if delete:
            logger.debug(f"Deleting attributes {list(delete)} from {self.dn}")
            self.transport.modify_delete(self.dn, delete).raise_for_error()
        if not is_empty(rename_to):
            self._rename(rename_to)

        logger.info(
            f"Updated {self.dn}: {len(add)} added, {len(replace)} replaced, "
            f"{len(delete)} deleted{', renamed' if not is_empty(rename_to) else ''}"
        )
        self._old_data = copy.deepcopy(self.data)

    def _rename(self, value: Any) -> None:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        top_rdn = dn_utils.component(self.dn_attribute, value)
        parent = dn_utils.parent(self.dn)
        logger.debug(f"Renaming {self.dn} to {top_rdn} under {parent}")
        self.transport.rename(self.dn, top_rdn, parent, True).raise_for_error()
        self.rdn = dn_utils.join(top_rdn, dn_utils.parent(self.rdn))
        self.dn = dn_utils.join(top_rdn, parent)

    def __repr__(self) -> str:
        return f"Entry(dn='{self.dn}')"
