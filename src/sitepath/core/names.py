"""Item name encoding and path joining.

Item names may contain characters that are unsafe in URLs. They are
written to URLs through a set of reversible replacements (e.g. "&" becomes
",-a-,") on top of regular percent-encoding.
"""

from dataclasses import dataclass
from urllib.parse import quote, unquote


@dataclass(frozen=True)
class NameReplacement:
    """Single reversible item-name replacement."""

    find: str
    replace_with: str


DEFAULT_REPLACEMENTS: tuple[NameReplacement, ...] = (
    NameReplacement(find="&", replace_with=",-a-,"),
    NameReplacement(find="?", replace_with=",-q-,"),
    NameReplacement(find="/", replace_with=",-s-,"),
    NameReplacement(find="*", replace_with=",-w-,"),
    NameReplacement(find=".", replace_with=",-d-,"),
    NameReplacement(find=":", replace_with=",-c-,"),
)


def decode_name(
    raw: str,
    replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
) -> str:
    """Decode a URL path or path component back to item names.

    Args:
        raw: Raw (possibly percent-encoded) path
        replacements: Name replacements to reverse

    Returns:
        Decoded path
    """
    decoded = unquote(raw)
    for replacement in replacements:
        decoded = decoded.replace(replacement.replace_with, replacement.find)
    return decoded


def encode_name(
    name: str,
    replacements: tuple[NameReplacement, ...] = DEFAULT_REPLACEMENTS,
) -> str:
    """Encode a single item name for use as a URL path segment.

    Inverse of decode_name() for names that do not already contain
    a replacement token.
    """
    encoded = name
    for replacement in replacements:
        encoded = encoded.replace(replacement.find, replacement.replace_with)
    return quote(encoded, safe=",-")


def make_path(first: str, second: str, separator: str = "/") -> str:
    """Join two path parts with exactly one separator between them.

    Args:
        first: Leading part (e.g., "/sitecore/content/")
        second: Trailing part (e.g., "/home")
        separator: Path separator

    Returns:
        Joined path (e.g., "/sitecore/content/home")
    """
    if not first:
        return second
    if not second:
        return first
    return first.rstrip(separator) + separator + second.lstrip(separator)
