"""
Distinguished name helpers.

Pure functions over fully-qualified and relative distinguished names. The
DN grammar itself (escaping, multi-valued RDNs) is handled by ldap3.
"""

from typing import List

from ldap3.utils.dn import escape_rdn, parse_dn, to_dn


def components(dn: str) -> List[str]:
    """Split a DN into its RDN components, keeping each component's text."""
    if not dn:
        return []
    return to_dn(dn)


def parent(dn: str) -> str:
    """
    Get the DN of the parent entry by stripping the first component.

    Args:
        dn: Fully-qualified (or relative) distinguished name

    Returns:
        str: Parent DN, empty string when the DN has a single component
    """
    return ",".join(components(dn)[1:])


def top_component(dn: str) -> str:
    """Get the first RDN component of a DN (e.g. 'cn=John Smith')."""
    parts = components(dn)
    return parts[0] if parts else ""


def primary_attribute(dn: str) -> str:
    """Get the lower-cased naming attribute of the first DN component."""
    return parse_dn(dn)[0][0].lower()


def relative_name(dn: str, base_dn: str) -> str:
    """
    Strip the base DN suffix (and its separating comma) from a DN.

    Args:
        dn: Fully-qualified distinguished name
        base_dn: Base distinguished name the DN lives under

    Returns:
        str: The DN relative to base_dn
    """
    if not base_dn:
        return dn
    return dn[: max(len(dn) - len(base_dn) - 1, 0)]


def join(rdn: str, base_dn: str) -> str:
    """Build a fully-qualified DN from a relative name and a base DN."""
    if not rdn:
        return base_dn
    if not base_dn:
        return rdn
    return f"{rdn},{base_dn}"


def component(attribute: str, value: str) -> str:
    """Build an RDN component, escaping the value."""
    return f"{attribute}={escape_rdn(value)}"
