from . import dn
from .values import collapse_values, expand_values, expand_data, has_class, is_empty, read_entry

__all__ = ['dn', 'collapse_values', 'expand_values', 'expand_data', 'has_class', 'is_empty', 'read_entry']
