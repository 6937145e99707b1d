"""
Game Hook — the capability interface the swap kernel consumes.

The kernel never touches process memory itself. Attaching to the game,
walking its pointers and reading/writing slot values are provided by an
external collaborator implementing these protocols.

Behavioral Contract:
- `read_slot_id` raises HookError when the value cannot be read
- `write_slot_id` reports failure through its return value
- `discover_entities` returns (player index, handle) pairs, at most four,
  with indices stable across ticks
"""

from typing import Any, List, Optional, Protocol, Set, Tuple

from swap_kernel.models.slots import EquipmentType, Hand, SlotLocation, WeaponSlot
from swap_kernel.monitor.scheduler import StopToken


class HookError(Exception):
    """Raised when the game hook cannot read a value."""
    pass


class GameHook(Protocol):
    """Live access to one attached game process."""

    def is_handle_valid(self) -> bool: ...

    def is_terminated(self) -> bool: ...

    def is_world_loaded(self) -> bool: ...

    def discover_entities(self) -> List[Tuple[int, Any]]: ...

    def read_slot_id(
        self,
        player: Any,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot] = None,
    ) -> int: ...

    def write_slot_id(
        self,
        player: Any,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot],
        new_id: int,
    ) -> bool: ...

    def get_current_sub_slot(self, player: Any, hand: Hand) -> WeaponSlot: ...

    def has_active_effect(self, player: Any, effect_id: int) -> bool: ...

    def get_active_effects(self, player: Any) -> Set[int]: ...


class ProcessLocator(Protocol):
    """Finds the game process and attaches a hook to it."""

    def wait_for_process(
        self, timeout_ms: int, interval_ms: int, stop: StopToken
    ) -> Optional[GameHook]:
        """
        Block until the process is found, the timeout elapses or `stop` is set.
        Returns None on timeout or stop.
        """
        ...
