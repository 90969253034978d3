"""Ordered "first match wins" rule tables.

Package manager, runtime version and framework detection are all expressed
as a list of Rule entries evaluated top to bottom. The list order is the
priority order, so it can be reviewed as a table.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """One row of a priority table.

    resolve receives the evaluation arguments and returns a value when the
    rule matches, or None to fall through to the next row.
    source describes the signal for evidence/debug logging.
    """

    source: str
    resolve: Callable[..., Optional[T]]


def first_match(rules: Sequence[Rule[T]], *args) -> tuple[Optional[T], Optional[str]]:
    """Evaluate rules in order and return (value, source) of the first hit.

    Returns (None, None) when no rule matches. Empty strings count as
    "no match" so resolvers can return raw text without pre-checking it.
    """
    for rule in rules:
        value = rule.resolve(*args)
        if value is not None and value != "":
            return value, rule.source
    return None, None
