from .ldap_connection import LDAPConnection

__all__ = ['LDAPConnection']
