"""Filters per check mode and the rule deciding when a warning is due."""
from typing import Dict, Mapping, Optional

from database.repositories.message_repo import (
    MessageFilter,
    NoFilter,
    BySender,
    ByRecipient,
)
from shared.config import CheckMode


def filters_for_mode(
    mode: CheckMode,
    counterparty: Optional[str] = None
) -> Dict[str, MessageFilter]:
    """
    Map each count name of a check mode to its message filter.

    Incoming messages are the ones the counterparty receives, outgoing the
    ones it sends. Counts are queried in the order returned.
    """
    mode = CheckMode(mode)

    if mode.needs_counterparty and not counterparty:
        raise ValueError(f"Check mode '{mode.value}' needs a counterparty identity")

    if mode is CheckMode.SINGLE:
        return {"total": NoFilter()}
    if mode is CheckMode.BIDIRECTIONAL:
        return {
            "incoming": ByRecipient(counterparty),
            "outgoing": BySender(counterparty),
        }
    return {"outgoing": BySender(counterparty)}


def should_warn(counts: Mapping[str, int]) -> bool:
    """A warning is due when any watched direction saw no messages."""
    return any(count == 0 for count in counts.values())
