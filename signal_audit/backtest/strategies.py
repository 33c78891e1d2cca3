"""
Strategy variants - one state machine, five eligibility predicates.
"""
from dataclasses import dataclass

from signal_audit.models import DailySignalPoint, StrategyKey
from signal_audit.utils.exceptions import UnknownStrategyError


@dataclass(frozen=True)
class StrategyMeta:
    label: str
    threshold: int
    entry_safe: bool


STRATEGY_ORDER: tuple[StrategyKey, ...] = (
    "status_flip",
    "strength_70",
    "strength_80",
    "entry_70",
    "entry_80",
)

STRATEGY_META: dict[str, StrategyMeta] = {
    "status_flip": StrategyMeta(label="Raw status flips", threshold=0, entry_safe=False),
    "strength_70": StrategyMeta(label="Strength 70+", threshold=70, entry_safe=False),
    "strength_80": StrategyMeta(label="Strength 80+", threshold=80, entry_safe=False),
    "entry_70": StrategyMeta(label="Entry-safe 70+", threshold=70, entry_safe=True),
    "entry_80": StrategyMeta(label="Entry-safe 80+", threshold=80, entry_safe=True),
}


def get_strategy_meta(strategy: str) -> StrategyMeta:
    try:
        return STRATEGY_META[strategy]
    except KeyError:
        raise UnknownStrategyError(strategy) from None


def is_eligible(point: DailySignalPoint, strategy: str) -> bool:
    """
    Whether a day can open (or keep) a position for the given strategy.

    Args:
        point: Day of the signal series
        strategy: Strategy key

    Returns:
        True when the day's status and strength satisfy the strategy
    """
    meta = get_strategy_meta(strategy)

    if point.status not in ("BUY", "SELL"):
        return False
    if meta.threshold == 0:
        return True
    if point.strength is None or point.strength < meta.threshold:
        return False
    if not meta.entry_safe:
        return True
    if meta.threshold == 80:
        return point.entry_qualifies_80
    return point.entry_qualifies_70
