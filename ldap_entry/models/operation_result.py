from dataclasses import dataclass
from typing import Optional, Type, TYPE_CHECKING

from ..exceptions import LDAPError, LDAPOperationError

if TYPE_CHECKING:
    from ..adapters.result_set import ResultSet

# Codes for failures that never reached the server
CONNECTION_FAILED = -1
CLIENT_ERROR = -2

@dataclass
class OperationResult:
    """Outcome of a single transport call."""
    success: bool = True
    code: int = 0
    message: str = ""
    result_set: Optional["ResultSet"] = None

    @classmethod
    def from_ldap3(cls, result: Optional[dict], result_set: Optional["ResultSet"] = None) -> "OperationResult":
        """Build a result from an ldap3 ``connection.result`` dictionary."""
        result = result or {}
        code = int(result.get("result", 0))
        message = result.get("message") or result.get("description") or ""
        return cls(success=code == 0, code=code, message=message, result_set=result_set)

    @classmethod
    def failure(cls, message: str, code: int = CONNECTION_FAILED) -> "OperationResult":
        return cls(success=False, code=code, message=message)

    def raise_for_error(self, error_class: Type[LDAPError] = LDAPOperationError) -> "OperationResult":
        """Raise ``error_class`` when the call failed, otherwise return self."""
        if not self.success:
            raise error_class(self.message, self.code)
        return self
