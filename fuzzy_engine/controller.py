"""
Orchestrates one fuzzy inference cycle.

The InferenceMachine owns the rule set, the universe registry, the current
input snapshot and the operator tables. Each compute() call bundles them into
an InferenceContext, aggregates the rule outputs and defuzzifies the result.
It is the main interface to the engine.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from fuzzy_engine.errors import UnknownUniverse, UnknownVariable
from fuzzy_engine.fuzzy_set import FuzzySet, Universe
from fuzzy_engine.operators import InferenceOptions
from fuzzy_engine.rule_engine import RuleSet

controller_log = logging.getLogger("controller")


@dataclass
class InferenceContext:
    """
    Per-cycle view passed through rule and expression evaluation.

    Attributes:
        values (Mapping[str, float]): Read-only input snapshot.
        universes (Dict[str, Universe]): The registry. Only set caches are
            mutated during a cycle.
        options (InferenceOptions): Operator tables for this cycle.
    """

    values: Mapping[str, float]
    universes: Dict[str, Universe]
    options: InferenceOptions

    def value_of(self, variable: str) -> float:
        try:
            return self.values[variable]
        except KeyError:
            raise UnknownVariable(variable) from None

    def universe(self, name: str) -> Universe:
        try:
            return self.universes[name]
        except KeyError:
            raise UnknownUniverse(name) from None


class InferenceMachine:
    """
    The fuzzy inference engine.

    Attributes:
        rules (RuleSet): The rule base.
        universes (Dict[str, Universe]): All universes by name.
        options (InferenceOptions): and / or / not, union and defuzzification.
        parallel (Optional[bool]): Aggregation mode; None defers to the rule
            set's own setting.
        last_aggregate (Optional[FuzzySet]): Output set of the latest
            successful compute(), for inspection and plotting.
    """

    def __init__(
        self,
        rules: RuleSet,
        universes: Union[Mapping[str, Universe], Iterable[Universe]],
        options: Optional[InferenceOptions] = None,
        parallel: Optional[bool] = None,
    ):
        """
        Initializes the machine.

        Args:
            rules (RuleSet): The validated rule base.
            universes: Either a name -> Universe mapping or an iterable of
                universes, which are keyed by their own names.
            options (Optional[InferenceOptions]): Operator tables; defaults to
                Zadeh logic, max union and center of mass.
            parallel (Optional[bool]): Overrides the rule set's mode.
        """
        if isinstance(universes, Mapping):
            self.universes: Dict[str, Universe] = dict(universes)
        else:
            self.universes = {universe.name: universe for universe in universes}
        self.rules = rules
        self.options = options or InferenceOptions.default()
        self.parallel = parallel
        self._values: Dict[str, float] = {}
        self.last_aggregate: Optional[FuzzySet] = None

        if rules.result_universe not in self.universes:
            controller_log.warning(
                "Output universe '%s' is not registered; compute() will fail.",
                rules.result_universe)
        controller_log.info(
            "Inference machine initialized with %d rules and %d universes (%s).",
            len(rules), len(self.universes), type(self.options.logic_ops).__name__)

    @property
    def values(self) -> Mapping[str, float]:
        return MappingProxyType(self._values)

    def update(self, values: Mapping[str, float]) -> None:
        """Replaces the whole input snapshot. Missing variables become unknown."""
        self._values = {name: float(value) for name, value in values.items()}
        controller_log.debug("Inputs updated: %s", self._values)

    def context(self) -> InferenceContext:
        return InferenceContext(
            values=MappingProxyType(self._values),
            universes=self.universes,
            options=self.options,
        )

    def compute(self) -> Tuple[str, float]:
        """
        Executes one full inference cycle.

        Returns:
            Tuple[str, float]: The aggregated set's name and the crisp value.

        Raises:
            FuzzyEngineError: On unknown variables, universes or sets, or on
                misuse of a set. Nothing is retried.
        """
        controller_log.debug("--- Inference cycle start (inputs= %s) ---", self._values)

        aggregate = self.rules.compute(self.context(), parallel=self.parallel)
        crisp = float(self.options.defuzz_func(aggregate))
        self.last_aggregate = aggregate

        controller_log.debug(
            "--- Inference cycle end (%s -> %.4f) ---", aggregate.name, crisp)
        return aggregate.name, crisp
