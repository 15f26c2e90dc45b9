"""Filtering of names against a whitelist or a blacklist of regexes."""

from __future__ import annotations

import re
from typing import Iterable


class WhiteBlackList:
    """Decides whether a name is included, based on a white- or blacklist.

    Only one of the two lists may be non-empty. With neither set, the
    list acts as an empty blacklist, so everything is included.
    """

    def __init__(
        self, whitelist: Iterable[str] = (), blacklist: Iterable[str] = ()
    ) -> None:
        white = dict.fromkeys(whitelist)
        black = dict.fromkeys(blacklist)
        if white and black:
            raise ValueError(
                "whitelist and blacklist are both set, they are mutually "
                "exclusive, only one of them can be set"
            )
        self.is_whitelist = bool(white)
        self._items: dict[str, None] = white if self.is_whitelist else black
        self._patterns: list[re.Pattern[str]] = []

    def parse(self) -> None:
        """Compile every item as a regular expression.

        Raises re.error if an item is not a valid pattern.
        """
        self._patterns = [re.compile(item) for item in self._items]

    def include(self, items: Iterable[str]) -> None:
        """Make the given items included."""
        if self.is_whitelist:
            self._items.update(dict.fromkeys(items))
        else:
            for item in items:
                self._items.pop(item, None)

    def exclude(self, items: Iterable[str]) -> None:
        """Make the given items excluded."""
        if self.is_whitelist:
            for item in items:
                self._items.pop(item, None)
        else:
            self._items.update(dict.fromkeys(items))

    def is_included(self, item: str) -> bool:
        """Return whether ``item`` passes the list."""
        matched = any(p.search(item) for p in self._patterns)
        return matched if self.is_whitelist else not matched

    def is_excluded(self, item: str) -> bool:
        """Return whether ``item`` is filtered out."""
        return not self.is_included(item)

    def status(self) -> str:
        """Describe the list, e.g. for logging."""
        items = ", ".join(self._items)
        if self.is_whitelist:
            return "whitelisting the following items: " + items
        return "blacklisting the following items: " + items