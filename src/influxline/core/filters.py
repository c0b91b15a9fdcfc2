"""Metric filters deciding which metrics a reporter includes."""

import fnmatch
from collections.abc import Callable, Iterable
from typing import Any

from influxline.core.ports import MetricFilter


class _AcceptAll:
    """Filter that accepts every metric."""

    def matches(self, name: str, metric: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "ALL"


ALL: MetricFilter = _AcceptAll()


class PrefixFilter:
    """Accepts metrics whose name starts with any of the given prefixes."""

    def __init__(self, *prefixes: str) -> None:
        if not prefixes:
            raise ValueError("at least one prefix is required")
        self._prefixes = tuple(prefixes)

    def matches(self, name: str, metric: Any) -> bool:
        return name.startswith(self._prefixes)


class GlobFilter:
    """Accepts metrics by shell-style name patterns.

    A metric matches when its name matches any include pattern and no
    exclude pattern. Exclusion wins over inclusion.

    Args:
        include: Patterns to accept; defaults to everything.
        exclude: Patterns to reject.
    """

    def __init__(
        self,
        include: Iterable[str] = ("*",),
        exclude: Iterable[str] = (),
    ) -> None:
        self._include = tuple(include)
        self._exclude = tuple(exclude)

    def matches(self, name: str, metric: Any) -> bool:
        # @tra: Filter.Glob.ExcludeWins
        if any(fnmatch.fnmatchcase(name, pattern) for pattern in self._exclude):
            return False
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self._include)


class _CallableFilter:
    def __init__(self, predicate: Callable[[str, Any], bool]) -> None:
        self._predicate = predicate

    def matches(self, name: str, metric: Any) -> bool:
        return bool(self._predicate(name, metric))


def as_filter(
    candidate: MetricFilter | Callable[[str, Any], bool] | None,
) -> MetricFilter:
    """Return a MetricFilter for a filter object, a plain predicate or None.

    None yields the accept-all filter.
    """
    if candidate is None:
        return ALL
    if isinstance(candidate, MetricFilter):
        return candidate
    if callable(candidate):
        return _CallableFilter(candidate)
    raise TypeError(f"expected a MetricFilter or callable, got {type(candidate).__name__}")
