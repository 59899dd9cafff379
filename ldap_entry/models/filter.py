from typing import Union


class Filter:
    """
    Immutable LDAP search filter builder.

    Every combinator returns a new Filter; the string form is always fully
    parenthesized. Raw string arguments are wrapped in parentheses as-is,
    without any validation.

    Examples:
        >>> str(Filter.create('objectClass=person').and_('uid=jdoe'))
        '(&(objectClass=person)(uid=jdoe))'
        >>> str(Filter.not_('uid=jdoe'))
        '(!(uid=jdoe))'
    """

    __slots__ = ("_filter",)

    def __init__(self, filter_string: str):
        object.__setattr__(self, "_filter", filter_string)

    def __setattr__(self, name, value):
        raise AttributeError("Filter is immutable")

    def __reduce__(self):
        return (Filter, (self._filter,))

    @classmethod
    def create(cls, raw: str = "objectclass=*") -> "Filter":
        """Wrap a raw filter component in one pair of parentheses."""
        return cls(f"({raw})")

    @staticmethod
    def _wrap(other: Union["Filter", str]) -> str:
        if isinstance(other, Filter):
            return other._filter
        return f"({other})"

    def and_(self, other: Union["Filter", str]) -> "Filter":
        return Filter(f"(&{self._filter}{self._wrap(other)})")

    def or_(self, other: Union["Filter", str]) -> "Filter":
        return Filter(f"(|{self._filter}{self._wrap(other)})")

    @staticmethod
    def _negate(other: Union["Filter", str]) -> str:
        return f"!{Filter._wrap(other)}"

    @staticmethod
    def not_(other: Union["Filter", str]) -> "Filter":
        return Filter(f"({Filter._negate(other)})")

    def and_not(self, other: Union["Filter", str]) -> "Filter":
        return self.and_(self._negate(other))

    def or_not(self, other: Union["Filter", str]) -> "Filter":
        return self.or_(self._negate(other))

    def __and__(self, other):
        return self.and_(other)

    def __or__(self, other):
        return self.or_(other)

    def __invert__(self):
        return Filter.not_(self)

    def __eq__(self, other):
        if isinstance(other, Filter):
            return self._filter == other._filter
        return NotImplemented

    def __hash__(self):
        return hash(self._filter)

    def __str__(self) -> str:
        return self._filter

    def __repr__(self) -> str:
        return f"Filter('{self._filter}')"
