"""
LDAP Connection facade for ldap-entry-client

This facade translates calls addressed by names relative to a base DN into
fully-qualified transport calls, and wraps what comes back as Entry and
SearchResults objects.
"""

from typing import Any, Dict, List, Optional, Union
import logging

from ..adapters.base_transport import BaseTransport
from ..adapters.ldap3_transport import LDAP3Transport, default_port
from ..config import LDAPConfig
from ..exceptions import LDAPBindError, LDAPConfigurationError, LDAPConnectionError, LDAPError
from ..models.entry import Entry
from ..models.filter import Filter
from ..models.operation_result import CONNECTION_FAILED
from ..models.search_results import SearchResults, build_data
from ..utils import dn as dn_utils

logger = logging.getLogger(__name__)

# Server result codes that mean the credentials were refused
BIND_REJECTED_CODES = (32, 49)
NO_SUCH_OBJECT = 32
READ_FILTER = "(objectclass=*)"


class LDAPConnection:
    """
    Directory connection working with names relative to a base DN.

    On construction the connection is opened and bound anonymously to verify
    the server can be reached. When the configuration names a ``bind_dn`` the
    connection then binds with it.

    Usage:
        >>> with LDAPConnection({'hostname': 'ldap.example.com',
        ...                      'base_dn': 'dc=example,dc=com'}) as conn:
        ...     people = conn.search(Filter.create('objectClass=person'), ['cn', 'mail'], 'ou=People')
        ...     for entry in people:
        ...         print(entry.rdn, entry.get('mail'))
    """

    def __init__(self, config: Dict[str, Any], transport: Optional[BaseTransport] = None) -> None:
        """
        Initialize and connect.

        Args:
            config (Dict[str, Any]): Connection settings. Required keys:
                - 'hostname': Server hostname or ldap:// / ldaps:// URL
                - 'base_dn': Base DN all relative names hang off
                Optional keys:
                - 'port': Server port (default: 636 for ldaps://, 389 otherwise)
                - 'binary_fields': Attributes returned as bytes (default: none)
                - 'bind_dn', 'password', 'keyring_service': Bind credentials
            transport (Optional[BaseTransport]): Transport to use instead of ldap3

        Raises:
            LDAPConfigurationError: If hostname or base_dn is missing
            LDAPConnectionError: If the server cannot be reached
            LDAPBindError: If the configured bind credentials are rejected
        """
        if not config.get("hostname"):
            raise LDAPConfigurationError("Hostname not specified.")
        if not config.get("base_dn"):
            raise LDAPConfigurationError("baseDN not specified.")

        self.hostname = config["hostname"]
        self.port = config.get("port") or default_port(self.hostname)
        self.base_dn = config["base_dn"]
        self.binary_fields = list(config.get("binary_fields") or [])
        self.transport = transport if transport is not None else LDAP3Transport(config)
        self.is_connected = False

        logger.info(f"Connecting to {self.hostname}:{self.port}")
        if not self.transport.open().success or not self.transport.bind().success:
            logger.error(f"❌ Could not connect to {self.hostname}:{self.port}")
            self.transport.close()
            raise LDAPConnectionError(f"Could not connect to {self.hostname}:{self.port}", CONNECTION_FAILED)
        self.is_connected = True

        if config.get("bind_dn"):
            try:
                self.bind(config["bind_dn"], LDAPConfig.get_password(config))
            except LDAPError:
                self.transport.close()
                self.is_connected = False
                raise

        logger.info(f"✅ Connected to {self.hostname}:{self.port} (base: {self.base_dn})")

    @classmethod
    def from_env(cls) -> "LDAPConnection":
        """Create a connection from LDAP_* environment variables (see LDAPConfig)."""
        return cls(LDAPConfig.get_config())

    def _dn(self, rdn: Optional[str]) -> str:
        return dn_utils.join(rdn, self.base_dn)

    def bind(self, dn: str, password: Optional[str]) -> None:
        """
        Bind as ``dn``.

        Raises:
            LDAPBindError: If the credentials are rejected
            LDAPConnectionError: If the server cannot be reached
            LDAPOperationError: For any other server error
        """
        result = self.transport.bind(dn, password)
        if result.success:
            logger.info(f"Bound as {dn}")
            return
        if result.code in BIND_REJECTED_CODES:
            logger.error(f"Bind rejected for {dn} (code {result.code})")
            raise LDAPBindError(f"Unable to bind as {dn}", result.code)
        if result.code == CONNECTION_FAILED:
            raise LDAPConnectionError(f"Could not connect to {self.hostname}:{self.port}", result.code)
        result.raise_for_error()

    def search(
        self,
        search_filter: Union[Filter, str],
        attributes: Optional[List[str]] = None,
        search_rdn: Optional[str] = None,
    ) -> SearchResults:
        """
        Search below the base DN (or below ``search_rdn`` relative to it).

        Args:
            search_filter: Filter object or raw filter string
            attributes: Attributes to fetch (None or empty for all)
            search_rdn: Optional relative DN to search under

        Returns:
            SearchResults: Lazy cursor over the matching entries
        """
        search_dn = self._dn(search_rdn)
        result = self.transport.search(search_dn, str(search_filter), attributes or []).raise_for_error()
        logger.debug(f"Search under {search_dn} matched {result.result_set.count()} entries")
        return SearchResults(self.transport, self.base_dn, result.result_set, self.binary_fields)

    def read(self, rdn: str, attributes: Optional[List[str]] = None) -> Optional[Entry]:
        """
        Read one entry by relative DN.

        Returns:
            Optional[Entry]: The entry, or None if it does not exist
        """
        dn = self._dn(rdn)
        result = self.transport.read_one(dn, READ_FILTER, attributes or [])
        if result.code == NO_SUCH_OBJECT:
            logger.debug(f"No entry at {dn}")
            return None
        result.raise_for_error()

        with result.result_set as results:
            raw_entry = results.first_entry()
            if raw_entry is None:
                return None
            data = build_data(self.transport, raw_entry, self.binary_fields)
        return Entry(self.transport, rdn, dn, data)

    def add(self, rdn: str, data: Dict[str, Any]) -> None:
        """Add an entry. Multi-valued attributes are given as lists."""
        dn = self._dn(rdn)
        logger.debug(f"Adding entry {dn}")
        self.transport.add_entry(dn, data).raise_for_error()

    def delete(self, rdn: str) -> None:
        dn = self._dn(rdn)
        logger.debug(f"Deleting entry {dn}")
        self.transport.delete_entry(dn).raise_for_error()

    def rename(
        self,
        old_rdn: str,
        new_rdn: str,
        new_parent: Optional[str] = None,
        delete_old_rdn: bool = False,
    ) -> None:
        """
        Change the top RDN of an entry, optionally moving it under a new parent.

        Args:
            old_rdn: Current relative DN
            new_rdn: New top RDN component (e.g. 'cn=New Name')
            new_parent: New parent relative to the base DN (default: current parent)
            delete_old_rdn: Remove the old RDN value instead of keeping it as an attribute value
        """
        old_dn = self._dn(old_rdn)
        if new_parent is None:
            parent = dn_utils.parent(old_dn)
        else:
            parent = self._dn(new_parent)
        self.transport.rename(old_dn, new_rdn, parent, delete_old_rdn).raise_for_error()

    def move(self, old_rdn: str, new_rdn: str) -> None:
        """Rename an entry given its old and new relative DNs, keeping its parent and old value."""
        old_dn = self._dn(old_rdn)
        parent = dn_utils.parent(old_dn)
        top_rdn = dn_utils.relative_name(self._dn(new_rdn), parent)
        self.transport.rename(old_dn, top_rdn, parent, False).raise_for_error()

    def add_attributes(self, rdn: str, data: Dict[str, Any]) -> None:
        self.transport.modify_add(self._dn(rdn), data).raise_for_error()

    def replace_attributes(self, rdn: str, data: Dict[str, Any]) -> None:
        self.transport.modify_replace(self._dn(rdn), data).raise_for_error()

    def delete_attributes(self, rdn: str, data: Dict[str, Any]) -> None:
        self.transport.modify_delete(self._dn(rdn), data).raise_for_error()

    def disconnect(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self.is_connected:
            self.transport.close()
            logger.info(f"Disconnected from {self.hostname}:{self.port}")
        self.is_connected = False

    def get_connection_info(self) -> Dict[str, Any]:
        return {
            "hostname": self.hostname,
            "port": self.port,
            "base_dn": self.base_dn,
            "binary_fields": self.binary_fields,
            "connected": self.is_connected,
        }

    def __str__(self) -> str:
        return f"LDAPConnection({self.hostname}:{self.port}, base_dn={self.base_dn})"

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes the connection."""
        self.disconnect()
