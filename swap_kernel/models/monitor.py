"""Monitor state, tick reports and status snapshots."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel

from swap_kernel.models.slots import EquipmentType, SlotLocation, WeaponSlot


class MonitorState(str, Enum):
    STOPPED = "stopped"
    SEARCHING = "searching"
    WORLD_NOT_LOADED = "attached_world_not_loaded"
    WORLD_LOADED = "attached_world_loaded"


class RevertResult(str, Enum):
    REVERTED = "reverted"
    NO_OVERRIDE = "no_override"         # Nothing recorded for the slot
    MISMATCH = "mismatch"               # Live ID is no longer the override's dest ID
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


class SwapFiring(BaseModel):
    """One trigger firing on one physical position."""

    trigger_id: str
    player_index: int
    equip_type: EquipmentType
    location: SlotLocation
    sub_slot: Optional[WeaponSlot] = None
    old_id: int
    new_id: int
    success: bool
    recorded: bool = False              # Override recorded in the ledger


class RevertEvent(BaseModel):
    """Outcome of one revert attempt."""

    player_index: int
    equip_type: EquipmentType
    location: SlotLocation
    result: RevertResult
    forced: bool = False
    source_id: Optional[int] = None
    dest_id: Optional[int] = None


class TickReport(BaseModel):
    """What happened during a single monitor tick."""

    tick: int
    state: MonitorState
    players: List[int] = []
    firings: List[SwapFiring] = []
    reverts: List[RevertEvent] = []
    forced_revert: bool = False
    next_interval_ms: int


class MonitorStatus(BaseModel):
    state: MonitorState
    running: bool
    ticks: int
    world_loaded: bool
    force_revert_pending: bool
    players: List[int] = []
    overrides: Dict[int, List[dict]] = {}
    cooldowns: Dict[str, Dict[int, int]] = {}
