"""
ldap-entry-client
=================

Work with directory entries as mutable, diffable objects addressed by names
relative to a base DN, on top of ldap3.

- LDAPConnection: relative-name facade (search, read, add, delete, rename, ...)
- Entry: one directory object; change ``data`` and call ``update()``
- SearchResults: lazy cursor with sorting and drain helpers
- Filter: immutable search filter builder
"""

from .exceptions import (
    LDAPBindError,
    LDAPConfigurationError,
    LDAPConnectionError,
    LDAPError,
    LDAPOperationError,
)
from .adapters import BaseTransport, LDAP3Transport
from .config import LDAPConfig
from .facade.ldap_connection import LDAPConnection
from .models import Entry, Filter, OperationResult, SearchResults

__version__ = "0.1.0"

__all__ = [
    'LDAPConnection',
    'LDAPConfig',
    'Entry',
    'Filter',
    'OperationResult',
    'SearchResults',
    'BaseTransport',
    'LDAP3Transport',
    'LDAPError',
    'LDAPConfigurationError',
    'LDAPConnectionError',
    'LDAPBindError',
    'LDAPOperationError',
]
