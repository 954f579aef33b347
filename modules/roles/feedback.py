"""Maps operation outcomes to the reaction marks users see."""

from __future__ import annotations

import enum
import logging
from typing import Union

import discord

from modules.roles.toggle import ToggleOutcome

__all__ = ["REACT_FAIL", "REACT_SUCCESS", "Signal", "acknowledge", "signal_for"]

log = logging.getLogger("secretariat.roles.feedback")

REACT_SUCCESS = "✅"
REACT_FAIL = "🟥"


class Signal(enum.Enum):
    SUCCESS = REACT_SUCCESS
    FAILURE = REACT_FAIL


def signal_for(outcome: Union[ToggleOutcome, bool, None]) -> Signal:
    """Success outcomes map to the success mark; everything else, including ambiguity, fails."""

    if isinstance(outcome, ToggleOutcome):
        return Signal.SUCCESS if outcome.success else Signal.FAILURE
    return Signal.SUCCESS if outcome is True else Signal.FAILURE


async def acknowledge(message: discord.Message, outcome: Union[ToggleOutcome, bool, None]) -> Signal:
    signal = signal_for(outcome)
    try:
        await message.add_reaction(signal.value)
    except discord.HTTPException:
        # Reaction failures are non-fatal (missing perms, deleted message, etc.).
        log.warning(
            "feedback reaction failed",
            exc_info=True,
            extra={"message_id": getattr(message, "id", None), "signal": signal.name},
        )
    return signal
