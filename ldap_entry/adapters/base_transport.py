from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..exceptions import LDAPConnectionError
from ..models.operation_result import OperationResult


class BaseTransport(ABC):
    """Abstract base class for directory protocol transports."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    def open(self) -> OperationResult:
        """Open the connection to the directory server."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass

    @abstractmethod
    def bind(self, user: Optional[str] = None, password: Optional[str] = None) -> OperationResult:
        """Bind with credentials, or anonymously when none are given."""
        pass

    @abstractmethod
    def search(self, base_dn: str, search_filter: str, attributes: Optional[List[str]] = None) -> OperationResult:
        """Subtree search; the result carries a ResultSet."""
        pass

    @abstractmethod
    def read_one(self, dn: str, search_filter: str, attributes: Optional[List[str]] = None) -> OperationResult:
        """Base-scope lookup of a single object; the result carries a ResultSet."""
        pass

    @abstractmethod
    def add_entry(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        pass

    @abstractmethod
    def delete_entry(self, dn: str) -> OperationResult:
        pass

    @abstractmethod
    def modify_add(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        pass

    @abstractmethod
    def modify_replace(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        pass

    @abstractmethod
    def modify_delete(self, dn: str, data: Dict[str, Any]) -> OperationResult:
        pass

    @abstractmethod
    def rename(self, dn: str, new_rdn: str, new_parent: Optional[str], delete_old_rdn: bool) -> OperationResult:
        """Change the top RDN and/or parent of an entry."""
        pass

    def __enter__(self):
        self.open().raise_for_error(LDAPConnectionError)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
