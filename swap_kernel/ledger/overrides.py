"""
Temporary Override Ledger — pending reversions for one player.

Each logical slot holds at most one OverrideRecord. Recording a new swap on
a slot replaces the previous record without reverting it: if one temporary
swap overrides another in the same slot, the original ID is gone and only
the latest swap is ever undone.

Behavioral Contract:
- Never writes over a value it did not put there. Before reverting, the live
  ID is re-read and must still equal the record's dest ID.
- A failed revert keeps the record, so the next reconcile pass retries it.
- A forced revert (world reload) attempts every record once, then clears
  the ledger whatever the outcome.
- Only weapon records expire on their own (the hand switched to its other
  sub-slot). Armor and ring records are cleared by forced revert alone.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from swap_kernel.hook.interface import HookError
from swap_kernel.models.monitor import RevertEvent, RevertResult
from swap_kernel.models.slots import (
    EquipmentType,
    Hand,
    LogicalSlot,
    OverrideRecord,
    weapon_slot,
)
from swap_kernel.slots.adapter import SlotAdapter, WeaponSlotAdapter

logger = logging.getLogger(__name__)


class OverrideLedger:
    """Temporary swaps recorded for a single player."""

    def __init__(self, player_index: int):
        self.player_index = player_index
        self._records: Dict[LogicalSlot, OverrideRecord] = {}

    def get(self, slot: LogicalSlot) -> Optional[OverrideRecord]:
        return self._records.get(slot)

    def set(self, slot: LogicalSlot, record: OverrideRecord) -> None:
        """Set (with overwrite) the temporary swap for the slot."""
        self._records[slot] = record

    def clear(self, slot: LogicalSlot) -> None:
        """Forget the slot's swap, indicating that it has been reverted."""
        self._records.pop(slot, None)

    def has(self, slot: LogicalSlot) -> bool:
        return slot in self._records

    def active(self) -> Dict[LogicalSlot, OverrideRecord]:
        return dict(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def to_list(self) -> List[dict]:
        return [
            {
                "equip_type": slot.equip_type.value,
                "location": slot.location.value,
                **record.model_dump(mode="json"),
            }
            for slot, record in self._records.items()
        ]

    # --- Reversion ---

    def revert(
        self,
        slot: LogicalSlot,
        player: Any,
        adapter: SlotAdapter,
        forced: bool = False,
    ) -> RevertEvent:
        """
        Restore the slot's source ID if the dest ID is still in place.
        The record is cleared only when the write succeeds.
        """
        record = self._records.get(slot)
        label = slot.label()
        if record is None:
            logger.error(
                "Player %d: tried to revert temporary %s swap that does not exist.",
                self.player_index, label,
            )
            return self._event(slot, RevertResult.NO_OVERRIDE, forced)

        try:
            live_id = adapter.read(player, slot.location, record.sub_slot)
        except HookError as e:
            logger.error(
                "Player %d: could not read %s to revert swap: %s",
                self.player_index, label, e,
            )
            return self._event(slot, RevertResult.READ_FAILED, forced, record)

        if live_id != record.dest_id:
            logger.error(
                "Player %d: %s is %d, not the expected temporary ID %d. Cannot revert swap.",
                self.player_index, adapter.describe(slot.location, record.sub_slot),
                live_id, record.dest_id,
            )
            return self._event(slot, RevertResult.MISMATCH, forced, record)

        if not adapter.write(player, slot.location, record.sub_slot, record.source_id):
            logger.error(
                "Player %d: failed to revert temporary %s %d to %d.",
                self.player_index, adapter.describe(slot.location, record.sub_slot),
                record.dest_id, record.source_id,
            )
            return self._event(slot, RevertResult.WRITE_FAILED, forced, record)

        logger.info(
            "Player %d: reverted temporary %s %d to %d%s.",
            self.player_index, adapter.describe(slot.location, record.sub_slot),
            record.dest_id, record.source_id, " (forced)" if forced else "",
        )
        self.clear(slot)
        return self._event(slot, RevertResult.REVERTED, forced, record)

    def reconcile(self, player: Any, adapter: WeaponSlotAdapter) -> List[RevertEvent]:
        """
        Revert weapon swaps whose sub-slot is no longer the hand's current one.
        Run once per tick, before any trigger is evaluated for the player.
        """
        events = []
        for hand in Hand:
            slot = weapon_slot(hand)
            record = self._records.get(slot)
            if record is None:
                continue
            try:
                current = adapter.current_sub_slot(player, hand)
            except HookError as e:
                logger.error(
                    "Player %d: could not read current %s-hand slot: %s",
                    self.player_index, hand.value, e,
                )
                continue
            if current == record.sub_slot:
                continue
            logger.info(
                "Player %d: %s-hand weapon switched to %s; reverting %s swap %d -> %d.",
                self.player_index, hand.value.capitalize(), current.value,
                record.sub_slot.value, record.source_id, record.dest_id,
            )
            events.append(self.revert(slot, player, adapter))
        return events

    def revert_all(
        self, player: Any, adapters: Mapping[EquipmentType, SlotAdapter]
    ) -> List[RevertEvent]:
        """Force-revert every recorded swap, then clear the ledger."""
        if not self._records:
            logger.info(
                "Player %d: no temporary swaps to force-revert.", self.player_index
            )
            return []

        events = []
        for slot in list(self._records):
            event = self.revert(slot, player, adapters[slot.equip_type], forced=True)
            if event.result != RevertResult.REVERTED:
                logger.warning(
                    "Player %d: forced revert of %s failed (%s). Clearing it anyway.",
                    self.player_index, slot.label(), event.result.value,
                )
            events.append(event)
        self._records.clear()
        return events

    def discard_all(self) -> int:
        """Drop every record without touching the game. Returns the count dropped."""
        count = len(self._records)
        if count:
            logger.warning(
                "Player %d is gone; discarding %d temporary swap(s) without reverting.",
                self.player_index, count,
            )
        self._records.clear()
        return count

    def _event(
        self,
        slot: LogicalSlot,
        result: RevertResult,
        forced: bool,
        record: Optional[OverrideRecord] = None,
    ) -> RevertEvent:
        return RevertEvent(
            player_index=self.player_index,
            equip_type=slot.equip_type,
            location=slot.location,
            result=result,
            forced=forced,
            source_id=record.source_id if record else None,
            dest_id=record.dest_id if record else None,
        )
