"""
Evaluates the fuzzy rule base and aggregates the rule outputs.

Each Rule binds a condition expression to a target (universe, set) pair. Its
output is a snapshot of the target set's cached values, restricted to the
entries whose degree does not exceed the rule's firing strength. The RuleSet
folds all rule outputs into one set with the operator table's union, either
in rule order or across a worker pool.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from fuzzy_engine.errors import ConfigurationError
from fuzzy_engine.expressions import Expression
from fuzzy_engine.fuzzy_set import FuzzySet

if TYPE_CHECKING:
    from fuzzy_engine.controller import InferenceContext

rule_engine_log = logging.getLogger("rule_engine")


class Rule:
    """
    'if <condition> then <result_universe> is <result_set>'.

    Attributes:
        condition (Expression): The antecedent.
        result_universe (str): Name of the output universe.
        result_set (str): Name of the set within the output universe.
    """

    __slots__ = ("_condition", "_result_universe", "_result_set")

    def __init__(self, condition: Expression, result_universe: str, result_set: str):
        self._condition = condition
        self._result_universe = result_universe
        self._result_set = result_set

    @property
    def condition(self) -> Expression:
        return self._condition

    @property
    def result_universe(self) -> str:
        return self._result_universe

    @property
    def result_set(self) -> str:
        return self._result_set

    @property
    def label(self) -> str:
        return f"{self._result_universe}: {self._result_set}"

    def compute(self, context: "InferenceContext") -> FuzzySet:
        """
        Evaluates the rule against the context.

        The firing strength W is the condition's degree. The result keeps the
        target set's cached (value, degree) pairs with degree <= W; pairs above
        W are dropped rather than clipped down to W. Entries only exist for
        values the target set has already been checked at, so an unprimed
        target yields an empty result.

        Args:
            context (InferenceContext): Inputs, universes and operators.

        Returns:
            FuzzySet: A snapshot named '<universe>: <set>'.
        """
        firing_strength = self._condition.eval(context)
        target = context.universe(self._result_universe).get(self._result_set)

        selected = {
            key: degree
            for key, degree in target.cached_items()
            if degree <= firing_strength
        }
        rule_engine_log.debug(
            "%s W= %.3f kept %d of %d points", self, firing_strength,
            len(selected), len(target))
        return FuzzySet.snapshot(self.label, selected)

    def __str__(self) -> str:
        return (f"(Rule {self._result_universe}:{self._result_set} "
                f"if:{self._condition.render()})")

    def __repr__(self) -> str:
        return f"<{self}>"


class RuleSet:
    """
    An ordered, non-empty collection of rules sharing one output universe.

    Attributes:
        rules (List[Rule]): The rules, in evaluation order.
        parallel (bool): Default aggregation mode for compute().
        max_workers (Optional[int]): Pool size for parallel mode; None means
            the machine's CPU count.
    """

    def __init__(self, rules: Sequence[Rule], parallel: bool = False,
                 max_workers: Optional[int] = None):
        rules = list(rules)
        if not rules:
            raise ConfigurationError("A rule set needs at least one rule")

        rule_universe = rules[0].result_universe
        for rule in rules:
            if rule.result_universe != rule_universe:
                raise ConfigurationError(
                    f"Rules are in different result universes "
                    f"({rule_universe} and {rule.result_universe})")

        if max_workers is not None and max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers}")

        self.rules: List[Rule] = rules
        self.parallel = parallel
        self.max_workers = max_workers
        rule_engine_log.info(
            "Rule set initialized with %d rules into universe '%s' (%s).",
            len(rules), rule_universe, "parallel" if parallel else "sequential")

    @property
    def result_universe(self) -> str:
        return self.rules[0].result_universe

    def compute(self, context: "InferenceContext", parallel: Optional[bool] = None) -> FuzzySet:
        """Aggregates all rules; ``parallel`` overrides the configured mode."""
        use_pool = self.parallel if parallel is None else parallel
        if use_pool:
            return self.compute_parallel(context)
        return self.compute_sequential(context)

    def compute_sequential(self, context: "InferenceContext") -> FuzzySet:
        """Folds rule outputs left to right with the union operator."""
        union = context.options.set_ops.union
        result = self.rules[0].compute(context)
        for rule in self.rules[1:]:
            result = union(result, rule.compute(context))
        return result

    def compute_parallel(self, context: "InferenceContext") -> FuzzySet:
        """
        Computes every rule on a thread pool and folds results as they finish.

        The fold order follows completion order, so the union operator must be
        commutative and associative. Set caches are guarded by per-set locks.
        A failing rule re-raises its exception here once the pool has drained.
        """
        union = context.options.set_ops.union
        workers = self.max_workers or os.cpu_count() or 1
        result: Optional[FuzzySet] = None

        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix="rule-worker") as pool:
            futures = [pool.submit(rule.compute, context) for rule in self.rules]
            for future in as_completed(futures):
                rule_result = future.result()
                result = rule_result if result is None else union(result, rule_result)

        rule_engine_log.debug(
            "Parallel aggregation of %d rules on %d workers done.", len(self.rules), workers)
        return result

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __str__(self) -> str:
        body = "".join(f"\t{rule}\n" for rule in self.rules)
        return f"(RuleSet\n{body})"
