from .entry import Entry
from .filter import Filter
from .operation_result import OperationResult
from .search_results import SearchResults

__all__ = ['Entry', 'Filter', 'OperationResult', 'SearchResults']
