"""
Slot Adapters — uniform read/write access to each equipment category.

Each adapter is bound to one GameHook and maps a category's locations onto
logical slots (the unit of override tracking) and physical positions (what
is actually read and written):

  weapon: logical slot per hand, positions primary/secondary per hand
  armor:  logical slot and single position per location
  ring:   logical slot and single position per ring slot, both iterated
"""

from typing import Any, Dict, List, Optional, Tuple

from swap_kernel.hook.interface import GameHook
from swap_kernel.models.slots import (
    ArmorLocation,
    EquipmentType,
    Hand,
    LogicalSlot,
    RingSlot,
    SlotLocation,
    WeaponSlot,
    armor_slot,
    ring_slot,
    weapon_slot,
)

Position = Tuple[SlotLocation, Optional[WeaponSlot]]


class SlotAdapter:
    """Base adapter. Subclasses define how locations map to positions."""

    equip_type: EquipmentType

    def __init__(self, hook: GameHook):
        self.hook = hook

    def read(self, player: Any, location: SlotLocation, sub_slot: Optional[WeaponSlot] = None) -> int:
        """Read the live ID. Raises HookError on failure."""
        return self.hook.read_slot_id(player, self.equip_type, location, sub_slot)

    def write(
        self,
        player: Any,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot],
        new_id: int,
    ) -> bool:
        return bool(self.hook.write_slot_id(player, self.equip_type, location, sub_slot, new_id))

    def positions(self, location: Optional[SlotLocation]) -> List[Position]:
        raise NotImplementedError

    def logical_slot(self, location: SlotLocation) -> LogicalSlot:
        raise NotImplementedError

    def describe(self, location: SlotLocation, sub_slot: Optional[WeaponSlot] = None) -> str:
        return self.logical_slot(location).label()


class WeaponSlotAdapter(SlotAdapter):
    equip_type = EquipmentType.WEAPON

    def positions(self, location: Optional[SlotLocation]) -> List[Position]:
        if not isinstance(location, Hand):
            raise ValueError(f"Weapon triggers need a hand, got {location!r}.")
        return [(location, WeaponSlot.PRIMARY), (location, WeaponSlot.SECONDARY)]

    def logical_slot(self, location: SlotLocation) -> LogicalSlot:
        return weapon_slot(location)

    def current_sub_slot(self, player: Any, hand: Hand) -> WeaponSlot:
        """The hand's currently equipped sub-slot. Raises HookError on failure."""
        return WeaponSlot(self.hook.get_current_sub_slot(player, hand))

    def describe(self, location: SlotLocation, sub_slot: Optional[WeaponSlot] = None) -> str:
        label = self.logical_slot(location).label()
        if sub_slot is None:
            return label
        return f"{label} ({sub_slot.value})"


class ArmorSlotAdapter(SlotAdapter):
    equip_type = EquipmentType.ARMOR

    def positions(self, location: Optional[SlotLocation]) -> List[Position]:
        if not isinstance(location, ArmorLocation):
            raise ValueError(f"Armor triggers need an armor location, got {location!r}.")
        return [(location, None)]

    def logical_slot(self, location: SlotLocation) -> LogicalSlot:
        return armor_slot(location)


class RingSlotAdapter(SlotAdapter):
    equip_type = EquipmentType.RING

    def positions(self, location: Optional[SlotLocation]) -> List[Position]:
        # Ring triggers check both ring slots unless one is named.
        if location is None:
            return [(slot, None) for slot in RingSlot]
        return [(RingSlot(location), None)]

    def logical_slot(self, location: SlotLocation) -> LogicalSlot:
        return ring_slot(location)


def build_adapters(hook: GameHook) -> Dict[EquipmentType, SlotAdapter]:
    """One adapter per category, all bound to `hook`."""
    return {
        EquipmentType.WEAPON: WeaponSlotAdapter(hook),
        EquipmentType.ARMOR: ArmorSlotAdapter(hook),
        EquipmentType.RING: RingSlotAdapter(hook),
    }
