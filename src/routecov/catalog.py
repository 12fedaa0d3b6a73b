"""
routecov.catalog - Registry of known routing-step keywords.

The catalog answers one question for both the tree builders and the
dump correlator: is this name a routing step? It also carries the
structure tables the source builder needs to rebuild nested scopes
from a flat fluent chain.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

# Routing-step keywords, as they appear as XML element names.
DEFAULT_STEP_NAMES = frozenset(
    {
        "aggregate",
        "bean",
        "choice",
        "circuitBreaker",
        "claimCheck",
        "convertBodyTo",
        "delay",
        "doCatch",
        "doFinally",
        "doTry",
        "dynamicRouter",
        "enrich",
        "filter",
        "idempotentConsumer",
        "inOnly",
        "inOut",
        "intercept",
        "loadBalance",
        "log",
        "loop",
        "marshal",
        "multicast",
        "onCompletion",
        "onException",
        "otherwise",
        "pipeline",
        "policy",
        "pollEnrich",
        "process",
        "recipientList",
        "removeHeader",
        "removeHeaders",
        "removeProperties",
        "removeProperty",
        "resequence",
        "rollback",
        "routingSlip",
        "saga",
        "sample",
        "script",
        "setBody",
        "setExchangePattern",
        "setHeader",
        "setProperty",
        "sort",
        "split",
        "step",
        "stop",
        "threads",
        "throttle",
        "throwException",
        "to",
        "toD",
        "transacted",
        "transform",
        "unmarshal",
        "validate",
        "when",
        "wireTap",
    }
)

# Steps whose following calls nest inside them until end().
BLOCK_STEPS = frozenset(
    {
        "aggregate",
        "choice",
        "circuitBreaker",
        "doTry",
        "filter",
        "idempotentConsumer",
        "intercept",
        "loadBalance",
        "loop",
        "multicast",
        "onCompletion",
        "onException",
        "pipeline",
        "policy",
        "resequence",
        "saga",
        "split",
        "step",
        "threads",
        "transacted",
    }
)

# Branch step -> the block step that owns it.
BRANCH_OWNERS = {
    "when": "choice",
    "otherwise": "choice",
    "doCatch": "doTry",
    "doFinally": "doTry",
}

_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")


def to_step_name(method_name: str) -> str:
    """Map a Python DSL method name to its routing-step keyword.

    Trailing underscores (used to dodge keywords such as ``from``) are
    dropped and snake_case becomes camelCase.

    Examples:
        >>> to_step_name("from_")
        'from'
        >>> to_step_name("do_try")
        'doTry'
        >>> to_step_name("to_d")
        'toD'
    """
    name = method_name.rstrip("_")
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


def local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` or ``prefix:`` from a tag."""
    if tag.startswith("{"):
        tag = tag.rsplit("}", 1)[-1]
    return tag.rsplit(":", 1)[-1]


class StepCatalog:
    """Lookup of recognized routing-step names.

    Attributes:
        names: The recognized step keywords.
    """

    def __init__(
        self,
        names: Iterable[str] | None = None,
        extra_steps: Iterable[str] = (),
        ignored_steps: Iterable[str] = (),
    ) -> None:
        """Initialize the catalog.

        Args:
            names: Base set of step names. Defaults to DEFAULT_STEP_NAMES.
            extra_steps: Additional names to recognize.
            ignored_steps: Names to stop recognizing.
        """
        base = set(DEFAULT_STEP_NAMES if names is None else names)
        base.update(extra_steps)
        base.difference_update(ignored_steps)
        self.names = frozenset(base)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StepCatalog:
        """Create a StepCatalog from the [catalog] config section.

        Args:
            data: Dictionary with optional ``extra_steps`` and
                ``ignored_steps`` lists.

        Returns:
            StepCatalog built over the default names.
        """
        return cls(
            extra_steps=data.get("extra_steps", []),
            ignored_steps=data.get("ignored_steps", []),
        )

    def is_step(self, name: str) -> bool:
        """True if ``name`` is a recognized routing step."""
        return name in self.names

    def is_block(self, name: str) -> bool:
        """True if ``name`` opens a scope closed by end()."""
        return name in BLOCK_STEPS and self.is_step(name)

    def branch_owner(self, name: str) -> str | None:
        """Return the owning block step for a branch step, else None."""
        if not self.is_step(name):
            return None
        return BRANCH_OWNERS.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)
