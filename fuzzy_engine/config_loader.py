"""
Model configuration loader for the fuzzy inference engine.

This module turns a TOML model description into a ready InferenceMachine so
callers never deal with file formats or operator lookups directly.

Layout
------
    [options]
    logic = "zadeh"                 # zadeh | product | lukasiewicz
    defuzzifier = "center_of_mass"  # center_of_mass | mean_of_maximum
    parallel = false
    max_workers = 0                 # 0 -> CPU count

    [universes.temp]
    domain = { start = -20.0, stop = 40.0, points = 61 }   # or an explicit list
    sets.cold = { shape = "triangular", params = [-20, -20, 10] }

    [[rules]]
    condition = "(and (is temp cold) (not (is humidity high)))"
    then = ["action", "low"]

    [[rules]]
    if = [["temp", "hot"], ["humidity", "high"]]   # pairs joined with AND
    any = true                                      # join with OR instead
    then = ["action", "high"]

Output universes (the one the rules write into) are scanned over their domain
after construction so that rule outputs have values to select from.

TOML parsing is done via Python's built-in ``tomllib`` module.
"""

import logging
import re
import tomllib
from typing import Any, Dict, List, Mapping

import numpy as np

from fuzzy_engine.controller import InferenceMachine
from fuzzy_engine.defuzzifier import DEFUZZIFIERS
from fuzzy_engine.errors import ConfigurationError
from fuzzy_engine.expressions import And, Expression, Is, Not, Or
from fuzzy_engine.fuzzy_set import Universe
from fuzzy_engine.membership import MEMBERSHIP_FACTORIES
from fuzzy_engine.operators import LOGIC_OPS, InferenceOptions, MaxUnion
from fuzzy_engine.rule_engine import Rule, RuleSet

config_log = logging.getLogger("config")

DEFAULT_CONFIG_PATH = "config/fis_config.toml"

_TOKEN = re.compile(r"\(|\)|[^\s()]+")


# ------------------------------------------------------------
# Load TOML
# ------------------------------------------------------------
def _load_toml(path: str) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


# ------------------------------------------------------------
# Condition reader
# ------------------------------------------------------------
def parse_condition(text: str) -> Expression:
    """
    Reads an s-expression condition such as '(or (is a x) (not (is b y)))'.

    This is the inverse of Expression.render().
    """
    tokens = _TOKEN.findall(text)
    if not tokens:
        raise ConfigurationError("Empty rule condition")
    expression, pos = _parse_expression(tokens, 0, text)
    if pos != len(tokens):
        raise ConfigurationError(f"Trailing tokens in condition: {text!r}")
    return expression


def _parse_expression(tokens: List[str], pos: int, text: str):
    if tokens[pos] != "(":
        raise ConfigurationError(f"Expected '(' at token {pos} in {text!r}")
    try:
        head = tokens[pos + 1]
        if head == "is":
            variable, set_name, close = tokens[pos + 2:pos + 5]
            if close != ")" or {"(", ")"} & {variable, set_name}:
                raise ConfigurationError(f"Malformed 'is' form in {text!r}")
            return Is(variable, set_name), pos + 5
        if head == "not":
            inner, pos = _parse_expression(tokens, pos + 2, text)
            node = Not(inner)
        elif head in ("and", "or"):
            left, pos = _parse_expression(tokens, pos + 2, text)
            right, pos = _parse_expression(tokens, pos, text)
            node = And(left, right) if head == "and" else Or(left, right)
        else:
            raise ConfigurationError(f"Unknown operator '{head}' in {text!r}")
        if tokens[pos] != ")":
            raise ConfigurationError(f"Expected ')' at token {pos} in {text!r}")
        return node, pos + 1
    except ConfigurationError:
        raise
    except (IndexError, ValueError):
        raise ConfigurationError(f"Unbalanced condition: {text!r}") from None


# ------------------------------------------------------------
# Builders
# ------------------------------------------------------------
def _build_domain(name: str, domain_cfg: Any) -> List[float]:
    """A {start, stop, points} table is expanded with linspace; a list is taken as is."""
    if domain_cfg is None:
        return []
    if isinstance(domain_cfg, Mapping):
        try:
            start = float(domain_cfg["start"])
            stop = float(domain_cfg["stop"])
            points = int(domain_cfg["points"])
            return np.linspace(start, stop, points).tolist()
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"universes.{name}.domain: {exc}") from None
    try:
        return [float(x) for x in domain_cfg]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"universes.{name}.domain: {exc}") from None


def _build_universe(name: str, cfg: Any) -> Universe:
    if not isinstance(cfg, Mapping):
        raise ConfigurationError(f"universes.{name}: expected a table, got {cfg!r}")
    sets_cfg = cfg.get("sets", {})
    if not isinstance(sets_cfg, Mapping):
        raise ConfigurationError(f"universes.{name}.sets: expected a table, got {sets_cfg!r}")

    universe = Universe(name, _build_domain(name, cfg.get("domain")))
    for set_name, set_cfg in sets_cfg.items():
        if not isinstance(set_cfg, Mapping):
            raise ConfigurationError(
                f"universes.{name}.sets.{set_name}: expected a table, got {set_cfg!r}")
        shape = str(set_cfg.get("shape", "triangular")).lower()
        factory = MEMBERSHIP_FACTORIES.get(shape)
        if factory is None:
            raise ConfigurationError(
                f"universes.{name}.sets.{set_name}: unknown shape '{shape}'")
        try:
            membership = factory(*set_cfg["params"])
        except ConfigurationError as exc:
            raise ConfigurationError(f"universes.{name}.sets.{set_name}: {exc}") from None
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"universes.{name}.sets.{set_name}: bad params ({exc})") from None
        universe.register(set_name, membership)
    return universe


def _build_condition(index: int, cfg: Mapping[str, Any]) -> Expression:
    if "condition" in cfg:
        expression = parse_condition(str(cfg["condition"]))
    elif "if" in cfg:
        pairs = cfg["if"]
        if not pairs:
            raise ConfigurationError(f"rules[{index}]: empty 'if' list")
        try:
            terms = [Is(str(variable), str(set_name)) for variable, set_name in pairs]
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"rules[{index}]: 'if' must be a list of [variable, set] pairs") from None
        expression = terms[0]
        for term in terms[1:]:
            expression = Or(expression, term) if cfg.get("any", False) else And(expression, term)
    else:
        raise ConfigurationError(f"rules[{index}]: needs 'condition' or 'if'")

    if cfg.get("negate", False):
        expression = Not(expression)
    return expression


def _build_rule(index: int, cfg: Mapping[str, Any]) -> Rule:
    try:
        universe_name, set_name = cfg["then"]
    except (KeyError, TypeError, ValueError):
        raise ConfigurationError(
            f"rules[{index}]: 'then' must be [universe, set]") from None
    return Rule(_build_condition(index, cfg), str(universe_name), str(set_name))


def _build_options(cfg: Mapping[str, Any]) -> InferenceOptions:
    logic_name = str(cfg.get("logic", "zadeh")).lower()
    defuzz_name = str(cfg.get("defuzzifier", "center_of_mass")).lower()
    if logic_name not in LOGIC_OPS:
        raise ConfigurationError(f"options.logic: unknown operators '{logic_name}'")
    if defuzz_name not in DEFUZZIFIERS:
        raise ConfigurationError(f"options.defuzzifier: unknown function '{defuzz_name}'")
    return InferenceOptions(LOGIC_OPS[logic_name](), MaxUnion(), DEFUZZIFIERS[defuzz_name])


# ------------------------------------------------------------
# Main loaders
# ------------------------------------------------------------
def build_machine(config: Mapping[str, Any]) -> InferenceMachine:
    """
    Builds an InferenceMachine from an already-parsed configuration dict.

    Raises:
        ConfigurationError: On unknown shapes or operators, malformed rules,
            or an invalid rule set.
    """
    opt_cfg = config.get("options", {})
    options = _build_options(opt_cfg)

    universes: Dict[str, Universe] = {
        name: _build_universe(name, cfg) for name, cfg in config.get("universes", {}).items()
    }
    rules = [_build_rule(i, cfg) for i, cfg in enumerate(config.get("rules", []))]

    try:
        max_workers = int(opt_cfg.get("max_workers", 0)) or None
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"options.max_workers: expected an integer, got {opt_cfg.get('max_workers')!r}") from None
    rule_set = RuleSet(rules, parallel=bool(opt_cfg.get("parallel", False)),
                       max_workers=max_workers)

    output = universes.get(rule_set.result_universe)
    if output is None:
        raise ConfigurationError(
            f"Rules write into universe '{rule_set.result_universe}', which is not defined")
    output.scan()

    config_log.info(
        "Model built: %d universes, %d rules, logic=%s.",
        len(universes), len(rules), type(options.logic_ops).__name__)
    return InferenceMachine(rule_set, universes, options)


def load_machine(path: str = DEFAULT_CONFIG_PATH) -> InferenceMachine:
    """Loads a TOML model file and builds its InferenceMachine."""
    config_log.info("Loading model from %s", path)
    try:
        config = _load_toml(path)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: {exc}") from None
    return build_machine(config)
