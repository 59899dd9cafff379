"""
Attribute value helpers shared by the read and write paths.

Directory attributes are always transported as lists of values. Callers work
with a collapsed form instead: a single value is exposed as a scalar, several
values as an ordered list, and no value at all as ``None``.
"""

from typing import Any, Iterable, List, Optional, Union

AttributeValue = Union[str, bytes, List[Union[str, bytes]]]


def collapse_values(values: Optional[Iterable[Any]]) -> Optional[AttributeValue]:
    """
    Collapse a transported value list into its scalar or list form.

    Args:
        values: Values as returned by the transport (list, tuple or None)

    Returns:
        None for no values, the value itself for one value, a list otherwise
    """
    if values is None:
        return None
    values = list(values)
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def expand_values(value: Optional[AttributeValue]) -> List[Any]:
    """Expand a scalar/list/None attribute value into the list form sent to the server."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def expand_data(data: dict) -> dict:
    """Expand every value of an attribute mapping for the transport."""
    return {name: expand_values(value) for name, value in data.items()}


def is_empty(value: Any) -> bool:
    """True for values that mean "attribute not present" (None, '' or an empty list)."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple)) and len(value) == 0:
        return True
    return False


def read_entry(raw_entry, binary_fields: Optional[Iterable[str]] = None) -> dict:
    """
    Build the attribute data mapping for a raw transport entry.

    Attributes named in ``binary_fields`` are kept as bytes, everything else is
    read as text. Single values are collapsed to scalars.

    Args:
        raw_entry: Entry handle exposing attribute_names(), values() and binary_values()
        binary_fields: Names of attributes holding opaque byte values

    Returns:
        dict: Attribute name -> collapsed value, in server order
    """
    binary = {name.lower() for name in (binary_fields or [])}
    data = {}
    for attribute in raw_entry.attribute_names():
        if attribute.lower() in binary:
            values = raw_entry.binary_values(attribute)
        else:
            values = raw_entry.values(attribute)
        collapsed = collapse_values(values)
        if collapsed is not None:
            data[attribute] = collapsed
    return data


def has_class(object_class: str, classes: Optional[AttributeValue]) -> bool:
    """Check whether an object class (or its lower-cased form) is in an objectClass value."""
    classes = expand_values(classes)
    return object_class in classes or object_class.lower() in classes
