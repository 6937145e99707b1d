"""Equipment slot addressing and temporary override records."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class EquipmentType(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    RING = "ring"


class Hand(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class WeaponSlot(str, Enum):
    """Physical weapon sub-slot within a hand."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


class ArmorLocation(str, Enum):
    HEAD = "head"
    BODY = "body"
    ARMS = "arms"
    LEGS = "legs"


class RingSlot(int, Enum):
    FIRST = 0
    SECOND = 1


SlotLocation = Union[Hand, ArmorLocation, RingSlot]

# Number of player slots the game keeps in memory.
MAX_PLAYERS = 4


class LogicalSlot(BaseModel):
    """The unit of override tracking: a hand, an armor location or a ring position."""

    model_config = ConfigDict(frozen=True)

    equip_type: EquipmentType
    location: SlotLocation

    def label(self) -> str:
        if self.equip_type == EquipmentType.WEAPON:
            return f"{self.location.value.capitalize()}-hand weapon"
        if self.equip_type == EquipmentType.ARMOR:
            return f"{self.location.value.capitalize()} armor"
        return f"Ring slot {self.location.value}"


class OverrideRecord(BaseModel):
    """A temporary swap pending reversion."""

    model_config = ConfigDict(frozen=True)

    source_id: int                          # Identifier before the swap
    dest_id: int                            # Identifier written by the swap
    sub_slot: Optional[WeaponSlot] = None   # Weapons only


def weapon_slot(hand: Hand) -> LogicalSlot:
    return LogicalSlot(equip_type=EquipmentType.WEAPON, location=hand)


def armor_slot(location: ArmorLocation) -> LogicalSlot:
    return LogicalSlot(equip_type=EquipmentType.ARMOR, location=location)


def ring_slot(position: RingSlot) -> LogicalSlot:
    return LogicalSlot(equip_type=EquipmentType.RING, location=position)


ALL_LOGICAL_SLOTS = (
    [weapon_slot(h) for h in Hand]
    + [armor_slot(a) for a in ArmorLocation]
    + [ring_slot(r) for r in RingSlot]
)
