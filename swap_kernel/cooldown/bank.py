"""
Cooldown Bank — per-trigger, per-player countdown timers.

Only SpEffect-conditioned triggers consult the bank. A trigger that fired
for a player is not re-evaluated for that player until its counter, which
is decremented once per monitor tick, reaches zero.
"""

from typing import Dict, Iterable, Tuple

from swap_kernel.models.slots import MAX_PLAYERS


def _check_index(player_index: int) -> None:
    if not 0 <= player_index < MAX_PLAYERS:
        raise ValueError(
            f"Invalid player index {player_index} (must be 0 to {MAX_PLAYERS - 1})."
        )


class CooldownBank:
    """Remaining milliseconds keyed by (trigger ID, player index)."""

    def __init__(self, trigger_ids: Iterable[str] = ()):
        self._remaining: Dict[Tuple[str, int], int] = {}
        for trigger_id in trigger_ids:
            self.register(trigger_id)

    def register(self, trigger_id: str) -> None:
        """Create zeroed cooldown entries for a trigger."""
        for player_index in range(MAX_PLAYERS):
            self._remaining.setdefault((trigger_id, player_index), 0)

    def get(self, trigger_id: str, player_index: int) -> int:
        _check_index(player_index)
        return self._remaining.get((trigger_id, player_index), 0)

    def is_cooling_down(self, trigger_id: str, player_index: int) -> bool:
        return self.get(trigger_id, player_index) > 0

    def reset(self, trigger_id: str, player_index: int, cooldown_ms: int) -> None:
        """Start (or restart) the cooldown for one trigger and player."""
        _check_index(player_index)
        self._remaining[(trigger_id, player_index)] = max(0, cooldown_ms)

    def reset_all(self, cooldown_ms: int = 0) -> None:
        for key in self._remaining:
            self._remaining[key] = max(0, cooldown_ms)

    def decrement_all(self, elapsed_ms: int) -> None:
        """Advance every timer by `elapsed_ms`, flooring at zero."""
        for key, remaining in self._remaining.items():
            if remaining > 0:
                self._remaining[key] = max(0, remaining - elapsed_ms)

    def snapshot(self) -> Dict[str, Dict[int, int]]:
        """Active (non-zero) cooldowns, grouped by trigger."""
        active: Dict[str, Dict[int, int]] = {}
        for (trigger_id, player_index), remaining in self._remaining.items():
            if remaining > 0:
                active.setdefault(trigger_id, {})[player_index] = remaining
        return active
