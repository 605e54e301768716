"""
Pluggable operator tables for fuzzy inference.

The engine never hard-codes fuzzy logic semantics. Conjunction, disjunction
and negation come from a LogicOps strategy, aggregation of rule outputs from a
SetOps strategy, and the crisp reduction from a defuzzification callable. The
three are bundled into InferenceOptions, which is read-only for a cycle.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Type

from fuzzy_engine.fuzzy_set import FuzzySet

DefuzzFunc = Callable[[FuzzySet], float]


class LogicOps(ABC):
    """Fuzzy AND / OR / NOT on degrees in [0, 1]."""

    name = "abstract"

    @abstractmethod
    def and_(self, a: float, b: float) -> float: ...

    @abstractmethod
    def or_(self, a: float, b: float) -> float: ...

    def not_(self, a: float) -> float:
        return 1.0 - a

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ZadehLogic(LogicOps):
    """Standard min / max / complement operators."""

    name = "zadeh"

    def and_(self, a: float, b: float) -> float:
        return min(a, b)

    def or_(self, a: float, b: float) -> float:
        return max(a, b)


class ProductLogic(LogicOps):
    """Algebraic product and probabilistic sum."""

    name = "product"

    def and_(self, a: float, b: float) -> float:
        return a * b

    def or_(self, a: float, b: float) -> float:
        return a + b - a * b


class LukasiewiczLogic(LogicOps):
    """Bounded difference and bounded sum."""

    name = "lukasiewicz"

    def and_(self, a: float, b: float) -> float:
        return max(0.0, a + b - 1.0)

    def or_(self, a: float, b: float) -> float:
        return min(1.0, a + b)


class SetOps(ABC):
    """Aggregation of two fuzzy sets into a new one."""

    @abstractmethod
    def union(self, left: FuzzySet, right: FuzzySet) -> FuzzySet: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _peak(fuzzy_set: FuzzySet) -> float:
    return max((degree for _, degree in fuzzy_set.cached_items()), default=0.0)


class MaxUnion(SetOps):
    """
    Key-wise maximum of two sets.

    The result is a snapshot named after the operand with the higher peak
    degree, with ties going to the lexicographically smaller name. Both the
    pairs and the name are commutative and associative, so the worker-pool
    aggregation gives the same answer in any completion order.
    """

    def union(self, left: FuzzySet, right: FuzzySet) -> FuzzySet:
        merged = dict(left.cached_items())
        for key, degree in right.cached_items():
            if degree > merged.get(key, 0.0):
                merged[key] = degree

        left_peak, right_peak = _peak(left), _peak(right)
        # Highest peak wins; on a tie the smaller name wins.
        if left_peak > right_peak or (left_peak == right_peak and left.name <= right.name):
            name = left.name
        else:
            name = right.name
        return FuzzySet.snapshot(name, merged)


@dataclass(frozen=True)
class InferenceOptions:
    """
    Operator tables used for one inference machine.

    Attributes:
        logic_ops (LogicOps): and / or / not on degrees.
        set_ops (SetOps): union of rule output sets.
        defuzz_func (DefuzzFunc): Reduces the aggregate set to a crisp value.
    """

    logic_ops: LogicOps
    set_ops: SetOps
    defuzz_func: DefuzzFunc

    @classmethod
    def default(cls) -> "InferenceOptions":
        from fuzzy_engine.defuzzifier import center_of_mass

        return cls(ZadehLogic(), MaxUnion(), center_of_mass)


LOGIC_OPS: Dict[str, Type[LogicOps]] = {
    ZadehLogic.name: ZadehLogic,
    ProductLogic.name: ProductLogic,
    LukasiewiczLogic.name: LukasiewiczLogic,
}
