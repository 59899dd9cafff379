from .base_transport import BaseTransport
from .ldap3_transport import LDAP3Transport
from .result_set import RawEntry, ResultSet

__all__ = ['BaseTransport', 'LDAP3Transport', 'RawEntry', 'ResultSet']
