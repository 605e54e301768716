"""
Error types raised by the fuzzy inference engine.

Every failure during model construction or evaluation is reported through one
of these classes so callers can catch ``FuzzyEngineError`` for all of them.
Lookup misses also derive from ``KeyError`` and value problems from
``ValueError`` so existing ``except`` clauses keep working.
"""


class FuzzyEngineError(Exception):
    """Base class for all fuzzy engine errors."""


class UnknownVariable(FuzzyEngineError, KeyError):
    """An expression referenced an input variable missing from the snapshot."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Input variable '{variable}' has no current value")

    def __str__(self) -> str:
        return self.args[0]


class UnknownUniverse(FuzzyEngineError, KeyError):
    """No universe is registered under the requested name."""

    def __init__(self, universe: str):
        self.universe = universe
        super().__init__(f"Universe '{universe}' does not exist")

    def __str__(self) -> str:
        return self.args[0]


class UnknownSet(FuzzyEngineError, KeyError):
    """The universe exists but holds no set with the requested name."""

    def __init__(self, universe: str, set_name: str):
        self.universe = universe
        self.set_name = set_name
        super().__init__(f"Set '{set_name}' does not exist in universe '{universe}'")

    def __str__(self) -> str:
        return self.args[0]


class ConfigurationError(FuzzyEngineError, ValueError):
    """Invalid rule set, membership parameters or model configuration."""


class InvalidMembershipUse(FuzzyEngineError):
    """A membership query was made against a set with no membership function."""

    def __init__(self, set_name: str):
        self.set_name = set_name
        super().__init__(
            f"Set '{set_name}' is a snapshot without a membership function "
            "and cannot be queried with check()"
        )


class InvalidDomainValue(FuzzyEngineError, ValueError):
    """A non-finite number was used as a domain key."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Domain value must be finite, got {value!r}")
