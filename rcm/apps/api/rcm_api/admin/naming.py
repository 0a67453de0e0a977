"""Display-name and tenant-local identifier helpers."""

from typing import Mapping, Optional

FALLBACK_DISPLAY_NAME = "N/A"


def display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Join both name parts; fall back to whichever is set, then to "N/A"."""
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return first_name or last_name or FALLBACK_DISPLAY_NAME


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split on single spaces: first token is the first name, the rest the last name.

    >>> split_full_name("Sanjay Kulkarni")
    ('Sanjay', 'Kulkarni')
    >>> split_full_name("Cher")
    ('Cher', '')
    """
    parts = full_name.split(" ")
    return parts[0], " ".join(parts[1:])


class EhsIdAllocator:
    """Hands out ``<PREFIX><NNN>`` ids with an independent counter per domain.

    Counters start at 1 and advance on every call to :meth:`next_id`, so the
    order of calls (not the order of domains in the input) decides numbering.
    """

    def __init__(self, prefixes: Mapping[str, str], width: int = 3):
        self._prefixes = dict(prefixes)
        self._width = width
        self._counters: dict[str, int] = {}

    def next_id(self, domain: str) -> str:
        prefix = self._prefixes.get(domain)
        if prefix is None:
            raise KeyError(f"No ehs_id prefix configured for domain {domain!r}")
        n = self._counters.get(domain, 0) + 1
        self._counters[domain] = n
        return f"{prefix}{str(n).zfill(self._width)}"
