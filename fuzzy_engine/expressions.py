"""
Condition expressions evaluated against an inference context.

Four node kinds make up a rule's condition: Is (membership test), And, Or and
Not. Evaluation returns a degree in [0, 1]; the fuzzy meaning of and / or /
not comes from the context's operator table. Both children of And / Or are
always evaluated, so the cache side effects of Is do not depend on which
logic operators are plugged in.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, FrozenSet

if TYPE_CHECKING:
    from fuzzy_engine.controller import InferenceContext

expressions_log = logging.getLogger("expressions")


class Expression(ABC):
    """Base class of the condition tree nodes."""

    @abstractmethod
    def eval(self, context: InferenceContext) -> float:
        """Returns the degree to which the condition holds."""

    @abstractmethod
    def render(self) -> str:
        """Returns a diagnostic s-expression, e.g. '(and (is a b) (is c d))'."""

    @abstractmethod
    def variables(self) -> FrozenSet[str]:
        """Names of the input variables the tree reads."""

    def __and__(self, other: Expression) -> And:
        return And(self, other)

    def __or__(self, other: Expression) -> Or:
        return Or(self, other)

    def __invert__(self) -> Not:
        return Not(self)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.render()}>"


class Is(Expression):
    """
    Membership test: 'variable is set'.

    The universe consulted is the one named exactly like the variable.
    Evaluating commits the degree to that set's cache.
    """

    def __init__(self, variable: str, set_name: str):
        self.variable = variable
        self.set_name = set_name

    def eval(self, context: InferenceContext) -> float:
        value = context.value_of(self.variable)
        fuzzy_set = context.universe(self.variable).get(self.set_name)
        degree = fuzzy_set.check(value)
        expressions_log.debug("%s at %.4f -> %.4f", self.render(), value, degree)
        return degree

    def render(self) -> str:
        return f"(is {self.variable} {self.set_name})"

    def variables(self) -> FrozenSet[str]:
        return frozenset((self.variable,))


class _Binary(Expression):
    keyword = ""

    def __init__(self, left: Expression, right: Expression):
        self.left = left
        self.right = right

    def render(self) -> str:
        return f"({self.keyword} {self.left.render()} {self.right.render()})"

    def variables(self) -> FrozenSet[str]:
        return self.left.variables() | self.right.variables()


class And(_Binary):
    keyword = "and"

    def eval(self, context: InferenceContext) -> float:
        left_result = self.left.eval(context)
        right_result = self.right.eval(context)
        return context.options.logic_ops.and_(left_result, right_result)


class Or(_Binary):
    keyword = "or"

    def eval(self, context: InferenceContext) -> float:
        left_result = self.left.eval(context)
        right_result = self.right.eval(context)
        return context.options.logic_ops.or_(left_result, right_result)


class Not(Expression):
    def __init__(self, expression: Expression):
        self.expression = expression

    def eval(self, context: InferenceContext) -> float:
        return context.options.logic_ops.not_(self.expression.eval(context))

    def render(self) -> str:
        return f"(not {self.expression.render()})"

    def variables(self) -> FrozenSet[str]:
        return self.expression.variables()
