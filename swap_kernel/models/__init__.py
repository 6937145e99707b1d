"""Swap Kernel data models."""

from swap_kernel.models.config import SwapperConfig
from swap_kernel.models.monitor import (
    MonitorState,
    MonitorStatus,
    RevertEvent,
    RevertResult,
    SwapFiring,
    TickReport,
)
from swap_kernel.models.slots import (
    ALL_LOGICAL_SLOTS,
    MAX_PLAYERS,
    ArmorLocation,
    EquipmentType,
    Hand,
    LogicalSlot,
    OverrideRecord,
    RingSlot,
    SlotLocation,
    WeaponSlot,
    armor_slot,
    ring_slot,
    weapon_slot,
)
from swap_kernel.models.trigger import SwapTrigger

__all__ = [
    "ALL_LOGICAL_SLOTS",
    "MAX_PLAYERS",
    "ArmorLocation",
    "EquipmentType",
    "Hand",
    "LogicalSlot",
    "MonitorState",
    "MonitorStatus",
    "OverrideRecord",
    "RevertEvent",
    "RevertResult",
    "RingSlot",
    "SlotLocation",
    "SwapFiring",
    "SwapTrigger",
    "SwapperConfig",
    "TickReport",
    "WeaponSlot",
    "armor_slot",
    "ring_slot",
    "weapon_slot",
]
