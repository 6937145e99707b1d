"""
Trigger Matcher — evaluates swap triggers against one player's equipment.

For each trigger:
  1. SpEffect condition (if any): the effect must be active and the
     player's cooldown for the trigger must have run out. Weapon triggers
     with an effect condition only touch the hand's current sub-slot;
     ID-only weapon triggers touch both.
  2. ParamID condition (if any): the live ID must equal it.
  3. Write live ID + offset. On success, restart the cooldown (effect
     triggers) and record the override (temporary triggers).

Every applicable position is checked on every tick; a trigger does not
stop after its first firing.
"""

import logging
from typing import Any, List, Mapping, Optional, Set

from swap_kernel.cooldown.bank import CooldownBank
from swap_kernel.hook.interface import HookError
from swap_kernel.ledger.overrides import OverrideLedger
from swap_kernel.models.monitor import SwapFiring
from swap_kernel.models.slots import (
    EquipmentType,
    OverrideRecord,
    SlotLocation,
    WeaponSlot,
)
from swap_kernel.models.trigger import SwapTrigger
from swap_kernel.slots.adapter import SlotAdapter, WeaponSlotAdapter

logger = logging.getLogger(__name__)


class PlayerEntity:
    """A connected player as seen during one tick."""

    def __init__(self, index: int, handle: Any, active_effects: Optional[Set[int]] = None):
        self.index = index
        self.handle = handle
        self.active_effects: Set[int] = set(active_effects or ())


class MatchOutcome:
    """Firings produced by evaluating one trigger for one player."""

    def __init__(self, trigger: SwapTrigger, skipped: Optional[str] = None):
        self.trigger = trigger
        self.skipped = skipped                 # Reason the trigger was not checked at all
        self.firings: List[SwapFiring] = []

    @property
    def fired(self) -> bool:
        return any(f.success for f in self.firings)


class TriggerMatcher:
    """Applies swap triggers through the slot adapters."""

    def __init__(self, cooldowns: CooldownBank, cooldown_ms: int):
        self.cooldowns = cooldowns
        self.cooldown_ms = cooldown_ms

    def evaluate(
        self,
        trigger: SwapTrigger,
        location: Optional[SlotLocation],
        player: PlayerEntity,
        adapter: SlotAdapter,
        ledger: OverrideLedger,
    ) -> MatchOutcome:
        """Evaluate one trigger on every position it applies to."""
        if adapter.equip_type != trigger.equip_type:
            logger.error(
                "%s trigger %s passed to %s checker.",
                trigger.equip_type.value, trigger.id, adapter.equip_type.value,
            )
            return MatchOutcome(trigger, skipped="wrong_category")

        if trigger.has_effect_condition:
            if trigger.sp_effect_id not in player.active_effects:
                return MatchOutcome(trigger, skipped="effect_inactive")
            if self.cooldowns.is_cooling_down(trigger.id, player.index):
                return MatchOutcome(trigger, skipped="cooldown")

        current_sub_slot: Optional[WeaponSlot] = None
        if isinstance(adapter, WeaponSlotAdapter) and trigger.has_effect_condition:
            try:
                current_sub_slot = adapter.current_sub_slot(player.handle, location)
            except HookError as e:
                logger.error(
                    "Player %d: could not read current %s-hand slot: %s",
                    player.index, location.value, e,
                )
                return MatchOutcome(trigger, skipped="read_failed")

        outcome = MatchOutcome(trigger)
        for position, sub_slot in adapter.positions(location):
            # Effect-driven weapon swaps only apply to the active loadout.
            if current_sub_slot is not None and sub_slot != current_sub_slot:
                continue
            firing = self._apply(trigger, position, sub_slot, player, adapter, ledger)
            if firing is not None:
                outcome.firings.append(firing)
        return outcome

    def evaluate_all(
        self,
        groups: List[tuple],
        player: PlayerEntity,
        adapters: Mapping[EquipmentType, SlotAdapter],
        ledger: OverrideLedger,
    ) -> List[SwapFiring]:
        """Evaluate every (label, location, triggers) group in order."""
        firings = []
        for _, location, triggers in groups:
            for trigger in triggers:
                outcome = self.evaluate(
                    trigger, location, player, adapters[trigger.equip_type], ledger
                )
                firings.extend(outcome.firings)
        return firings

    def _apply(
        self,
        trigger: SwapTrigger,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot],
        player: PlayerEntity,
        adapter: SlotAdapter,
        ledger: OverrideLedger,
    ) -> Optional[SwapFiring]:
        label = adapter.describe(location, sub_slot)
        try:
            current_id = adapter.read(player.handle, location, sub_slot)
        except HookError as e:
            logger.error("Player %d: could not read %s: %s", player.index, label, e)
            return None

        if not trigger.matches_id(current_id):
            return None

        new_id = current_id + trigger.param_id_offset
        firing = SwapFiring(
            trigger_id=trigger.id,
            player_index=player.index,
            equip_type=trigger.equip_type,
            location=location,
            sub_slot=sub_slot,
            old_id=current_id,
            new_id=new_id,
            success=False,
        )

        if not adapter.write(player.handle, location, sub_slot, new_id):
            logger.error(
                "Player %d: %s trigger failed: %s", player.index, label, trigger.describe()
            )
            return firing

        firing.success = True
        logger.info(
            "Player %d: %s trigger succeeded: %s (%d -> %d)",
            player.index, label, trigger.describe(), current_id, new_id,
        )

        if trigger.has_effect_condition:
            self.cooldowns.reset(trigger.id, player.index, self.cooldown_ms)

        if not trigger.is_permanent:
            # May replace an existing temporary swap, which is discarded.
            ledger.set(
                adapter.logical_slot(location),
                OverrideRecord(source_id=current_id, dest_id=new_id, sub_slot=sub_slot),
            )
            firing.recorded = True
            logger.info(
                "Player %d: recording temporary %s swap: %d -> %d",
                player.index, label, current_id, new_id,
            )
        return firing
