"""Swapper configuration — timing settings and trigger lists."""

from typing import Dict, List, Tuple

from pydantic import BaseModel, Field

from swap_kernel.models.slots import ArmorLocation, Hand
from swap_kernel.models.trigger import SwapTrigger


class SwapperConfig(BaseModel):
    """Settings for game hooking plus the swap triggers for every slot group."""

    process_search_timeout_ms: int = Field(default=3_600_000, gt=0)   # 1 hour
    process_search_interval_ms: int = Field(default=500, gt=0)
    monitor_interval_ms: int = Field(default=10, gt=0)
    game_loaded_interval_ms: int = Field(default=200, gt=0)
    sp_effect_trigger_cooldown_ms: int = Field(default=500, ge=0)

    left_weapon_triggers: List[SwapTrigger] = []
    right_weapon_triggers: List[SwapTrigger] = []
    head_armor_triggers: List[SwapTrigger] = []
    body_armor_triggers: List[SwapTrigger] = []
    arms_armor_triggers: List[SwapTrigger] = []
    legs_armor_triggers: List[SwapTrigger] = []
    ring_triggers: List[SwapTrigger] = []

    def trigger_groups(self) -> List[Tuple[str, object, List[SwapTrigger]]]:
        """
        Trigger lists in evaluation order, with their label and location.
        Ring triggers cover both ring positions, so their location is None.
        """
        return [
            ("Left-Hand Weapon", Hand.LEFT, self.left_weapon_triggers),
            ("Right-Hand Weapon", Hand.RIGHT, self.right_weapon_triggers),
            ("Head Armor", ArmorLocation.HEAD, self.head_armor_triggers),
            ("Body Armor", ArmorLocation.BODY, self.body_armor_triggers),
            ("Arms Armor", ArmorLocation.ARMS, self.arms_armor_triggers),
            ("Legs Armor", ArmorLocation.LEGS, self.legs_armor_triggers),
            ("Ring", None, self.ring_triggers),
        ]

    def all_triggers(self) -> List[SwapTrigger]:
        return [t for _, _, triggers in self.trigger_groups() for t in triggers]

    def trigger_counts(self) -> Dict[str, int]:
        return {label: len(triggers) for label, _, triggers in self.trigger_groups()}

