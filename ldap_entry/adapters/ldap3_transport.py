import logging
from typing import Any, Callable, Dict, List, Optional

from ldap3 import (
    ALL,
    ALL_ATTRIBUTES,
    ANONYMOUS,
    BASE,
    MODIFY_ADD,
    MODIFY_DELETE,
    MODIFY_REPLACE,
    SIMPLE,
    SUBTREE,
    SYNC,
    Connection,
    Server,
)
from ldap3.core.exceptions import LDAPCommunicationError, LDAPException

from ..exceptions import LDAPConfigurationError
from ..models.operation_result import CLIENT_ERROR, CONNECTION_FAILED, OperationResult
from ..utils.values import expand_data
from .base_transport import BaseTransport
from .result_set import ResultSet

logger = logging.getLogger(__name__)


def default_port(hostname: str) -> int:
    """636 for ldaps:// URLs, 389 otherwise."""
    return 636 if hostname.lower().startswith("ldaps://") else 389


class LDAP3Transport(BaseTransport):
    """
    Directory transport built on ldap3.

    Every operation returns an OperationResult carrying the server's result
    code and message; nothing is raised for protocol-level failures. Socket
    failures are reported with code -1.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the transport with connection settings.

        Args:
            config: Dictionary containing connection settings.
                   Required keys:
                   - 'hostname': Server hostname or ldap:// / ldaps:// URL

                   Optional keys with defaults:
                   - 'port': Server port (default: 636 for ldaps://, 389 otherwise)
                   - 'use_ssl': Enable SSL/TLS (default: from the URL scheme)
                   - 'connect_timeout': Connection timeout in seconds (default: 30)
                   - 'get_info': Server info level (default: ALL)
                   - 'client_strategy': ldap3 client strategy (default: SYNC)

        Raises:
            LDAPConfigurationError: If the hostname is missing
            TypeError: If configuration is not a dictionary
        """
        if not isinstance(config, dict):
            raise TypeError("Configuration must be a dictionary")
        if not config.get("hostname"):
            raise LDAPConfigurationError("Hostname not specified.")

        super().__init__(config)
        self.hostname = config["hostname"]
        self.port = config.get("port") or default_port(self.hostname)
        self.use_ssl = config.get("use_ssl", self.hostname.lower().startswith("ldaps://"))
        self.connect_timeout = config.get("connect_timeout", 30)
        self.get_info = config.get("get_info", ALL)
        self.client_strategy = config.get("client_strategy", SYNC)

        self._server = None
        self.connection: Optional[Connection] = None

        logger.debug(f"ldap3 transport initialized for server: {self.hostname}:{self.port}")

    def _create_server(self) -> Server:
        if not self._server:
            self._server = Server(
                self.hostname,
                port=self.port,
                use_ssl=self.use_ssl,
                get_info=self.get_info,
                connect_timeout=self.connect_timeout,
            )
            logger.debug(f"ldap3 server object created: {self.hostname}:{self.port}")
        return self._server

    def _run(self, description: str, operation: Callable[[], Any], result_set_factory=None) -> OperationResult:
        """Run one ldap3 call and turn its outcome into an OperationResult."""
        if self.connection is None:
            return OperationResult.failure(f"Not connected to {self.hostname}:{self.port}")
        logger.debug(f"ldap3 {description}")
        try:
            operation()
        except LDAPCommunicationError as e:
            logger.error(f"Communication failure during {description}: {e}")
            return OperationResult.failure(str(e), CONNECTION_FAILED)
        except LDAPException as e:
            logger.error(f"ldap3 rejected {description}: {e}")
            return OperationResult.failure(str(e), CLIENT_ERROR)

        result_set = result_set_factory() if result_set_factory else None
        result = OperationResult.from_ldap3(self.connection.result, result_set)
        if not result.success:
            logger.debug(f"{description} failed with code {result.code}: {result.message}")
        return result

    def open(self) -> OperationResult:
        if self.connection is not None and not self.connection.closed:
            return OperationResult()
        try:
            self.connection = Connection(
                self._create_server(),
                client_strategy=self.client_strategy,
                raise_exceptions=False,
            )
            self.connection.open()
        except LDAPCommunicationError as e:
            logger.error(f"Could not connect to {self.hostname}:{self.port}: {e}")
            self.connection = None
            return OperationResult.failure(f"Could not connect to {self.hostname}:{self.port}")
        logger.info(f"Connected to {self.hostname}:{self.port}")
        return OperationResult()

    def close(self) -> None:
        if self.connection is None:
            return
        try:
            self.connection.unbind()
            logger.debug("ldap3 connection closed")
        except LDAPException as e:
            logger.warning(f"Error while closing connection: {e}")
        finally:
            self.connection = None

    def bind(self, user: Optional[str] = None, password: Optional[str] = None) -> OperationResult:
        if self.connection is None:
            return OperationResult.failure(f"Not connected to {self.hostname}:{self.port}")
        self.connection.user = user
        self.connection.password = password
        self.connection.authentication = SIMPLE if user else ANONYMOUS
        return self._run(f"bind as '{user or 'anonymous'}'", self.connection.bind)

    @staticmethod
    def _attributes(attributes: Optional[List[str]]) -> List[str]:
        return list(attributes) if attributes else [ALL_ATTRIBUTES]

    def _search(self, base_dn: str, search_filter: str, scope, attributes: Optional[List[str]]) -> OperationResult:
        description = f"search: filter='{search_filter}', base='{base_dn}', scope='{scope}'"
        return self._run(
            description,
            lambda: self.connection.search(
                search_base=base_dn,
                search_filter=search_filter,
                search_scope=scope,
                attributes=self._attributes(attributes),
            ),
            lambda: ResultSet(list(self.connection.response or [])),
        )

    def search(self, base_dn: str, search_filter: str, attributes: Optional[List[str]] = None) -> OperationResult:
        return self._search(base_dn, search_filter, SUBTREE, attributes)

    def read_one(self, dn: str, search_filter: str, attributes: Optional[List[str]] = None) -> OperationResult:
        return self._search(dn, search_filter, BASE, attributes)

    def add_entry(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        return self._run(
            f"add '{dn}'",
            lambda: self.connection.add(dn, attributes=expand_data(data)),
        )

    def delete_entry(self, dn: str) -> OperationResult:
        return self._run(f"delete '{dn}'", lambda: self.connection.delete(dn))

    def _modify(self, kind: str, operation, dn: str, data: Dict[str, Any]) -> OperationResult:
        changes = {name: [(operation, values)] for name, values in expand_data(data).items()}
        return self._run(
            f"modify ({kind}) '{dn}': {sorted(changes)}",
            lambda: self.connection.modify(dn, changes),
        )

    def modify_add(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        return self._modify("add", MODIFY_ADD, dn, data)

    def modify_replace(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        return self._modify("replace", MODIFY_REPLACE, dn, data)

    def modify_delete(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        return self._modify("delete", MODIFY_DELETE, dn, data)

    def rename(self, dn: str, new_rdn: str, new_parent: Optional[str], delete_old_rdn: bool) -> OperationResult:
        return self._run(
            f"rename '{dn}' -> '{new_rdn}' under '{new_parent}'",
            lambda: self.connection.modify_dn(
                dn, new_rdn, delete_old_dn=delete_old_rdn, new_superior=new_parent
            ),
        )

    def get_connection_info(self) -> Dict[str, Any]:
        """Connection settings (no credentials)."""
        return {
            "hostname": self.hostname,
            "port": self.port,
            "use_ssl": self.use_ssl,
            "connect_timeout": self.connect_timeout,
            "connected": self.connection is not None,
        }

    def __str__(self) -> str:
        ssl_status = "SSL" if self.use_ssl else "non-SSL"
        return f"LDAP3Transport({self.hostname}:{self.port}, {ssl_status})"
