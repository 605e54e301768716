"""
Fuzzy sets with memoized membership degrees, grouped into universes.

A FuzzySet built from a membership function fills its cache lazily: every
distinct crisp value is evaluated once and the degree is kept while it is
strictly positive. A FuzzySet built as a snapshot (the output of a rule or of
a union) has no membership function; its cache is its whole definition.

A Universe is the registry of sets that share one variable's value domain.
Expressions look universes up by the variable name, so a universe and the
input variable it describes carry the same name.
"""

import logging
import math
import threading
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fuzzy_engine.errors import InvalidDomainValue, InvalidMembershipUse, UnknownSet
from fuzzy_engine.membership import MembershipFunction

fuzzy_set_log = logging.getLogger("fuzzy_set")


class FuzzySet:
    """
    A named membership evaluator with a sparse degree cache.

    Attributes:
        name (str): The set's label, e.g. 'cold' or 'action: low'.
        membership (Optional[MembershipFunction]): The degree function, or
            None for a snapshot set.
        cache (Dict[float, float]): Known (crisp value -> degree) pairs. Only
            strictly positive degrees are retained.
    """

    def __init__(self, name: str, membership: Optional[MembershipFunction] = None):
        self.name = name
        self.membership = membership
        self.cache: Dict[float, float] = {}
        self._lock = threading.Lock()

    @classmethod
    def snapshot(cls, name: str, values: Mapping[float, float]) -> "FuzzySet":
        """Builds a set without membership function from explicit pairs."""
        fuzzy_set = cls(name)
        fuzzy_set.cache = {float(k): float(v) for k, v in values.items() if v > 0.0}
        return fuzzy_set

    @property
    def is_snapshot(self) -> bool:
        return self.membership is None

    def check(self, x: float) -> float:
        """
        Returns the membership degree of x and commits it to the cache.

        This is a committing read: a cache miss evaluates the membership
        function once and stores the result, unless the degree is <= 0, in
        which case nothing is retained. The lookup, evaluation and commit run
        under the set's lock, so concurrent callers never see a partial entry.

        Args:
            x (float): The crisp value to test.

        Returns:
            float: The degree of membership.

        Raises:
            InvalidDomainValue: If x is NaN or infinite.
            InvalidMembershipUse: If this set is a snapshot.
        """
        x = float(x)
        if not math.isfinite(x):
            raise InvalidDomainValue(x)
        if self.membership is None:
            raise InvalidMembershipUse(self.name)

        with self._lock:
            degree = self.cache.get(x)
            if degree is not None:
                return degree
            degree = float(self.membership(x))
            if degree > 0.0:
                self.cache[x] = degree
        return degree

    def cached_items(self) -> List[Tuple[float, float]]:
        """Returns a sorted copy of the cached (value, degree) pairs."""
        with self._lock:
            return sorted(self.cache.items())

    def __len__(self) -> int:
        return len(self.cache)

    def __repr__(self) -> str:
        kind = "snapshot" if self.is_snapshot else "memo"
        return f"FuzzySet(name={self.name!r}, {kind}, entries={len(self.cache)})"


class Universe:
    """
    A named registry of fuzzy sets over one variable's domain.

    Attributes:
        name (str): Universe name. For input universes this is also the name
            of the input variable.
        domain (List[float]): Advisory sample points, used by scan() and by
            the plotting utilities. Not enforced on the sets.
        sets (Dict[str, FuzzySet]): Registered sets by name.
    """

    def __init__(self, name: str, domain: Optional[Iterable[float]] = None):
        self.name = name
        self.domain: List[float] = [float(x) for x in domain] if domain is not None else []
        self.sets: Dict[str, FuzzySet] = {}

    def set_domain(self, domain: Iterable[float]) -> None:
        self.domain = [float(x) for x in domain]

    def register(self, name: str, membership: MembershipFunction) -> FuzzySet:
        """
        Adds a set unless one with the same name already exists.

        The first registration wins; a duplicate is ignored with a warning.

        Returns:
            FuzzySet: The set stored under ``name``.
        """
        existing = self.sets.get(name)
        if existing is not None:
            fuzzy_set_log.warning(
                "Universe '%s' already has a set named '%s'; duplicate ignored.",
                self.name, name)
            return existing
        fuzzy_set = FuzzySet(name, membership)
        self.sets[name] = fuzzy_set
        fuzzy_set_log.debug("Universe '%s': registered set '%s'.", self.name, name)
        return fuzzy_set

    def get(self, set_name: str) -> FuzzySet:
        try:
            return self.sets[set_name]
        except KeyError:
            raise UnknownSet(self.name, set_name) from None

    def memberships_at(self, x: float) -> Dict[str, float]:
        """Evaluates every registered set at x. Populates their caches."""
        return {name: fuzzy_set.check(x) for name, fuzzy_set in self.sets.items()}

    def scan(self, points: Optional[Sequence[float]] = None) -> int:
        """
        Evaluates every set at every domain point (or the given points).

        Output universes need populated caches before rules can select from
        them, so this is the usual way to prime them after construction.

        Returns:
            int: Number of points evaluated.
        """
        points = self.domain if points is None else points
        for x in points:
            self.memberships_at(x)
        fuzzy_set_log.info(
            "Universe '%s': scanned %d points across %d sets.",
            self.name, len(points), len(self.sets))
        return len(points)

    def set_names(self) -> List[str]:
        return list(self.sets)

    def __contains__(self, set_name: object) -> bool:
        return set_name in self.sets

    def __repr__(self) -> str:
        return (f"Universe(name={self.name!r}, sets={self.set_names()!r}, "
                f"domain_points={len(self.domain)})")
