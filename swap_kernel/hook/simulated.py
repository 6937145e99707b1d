"""
Simulated game — an in-memory implementation of the hook protocols.

Used by the test-suite and by the CLI's `--simulate` dry-run mode. In
production, the hook comes from a memory-reading collaborator.
"""

from typing import Dict, List, Optional, Set, Tuple

from swap_kernel.hook.interface import HookError
from swap_kernel.models.slots import (
    MAX_PLAYERS,
    ArmorLocation,
    EquipmentType,
    Hand,
    RingSlot,
    SlotLocation,
    WeaponSlot,
)
from swap_kernel.monitor.scheduler import Deadline, StopToken


class SimulatedPlayer:
    """Equipment state of one connected player."""

    def __init__(
        self,
        weapons: Optional[Dict[Tuple[Hand, WeaponSlot], int]] = None,
        armor: Optional[Dict[ArmorLocation, int]] = None,
        rings: Optional[Dict[RingSlot, int]] = None,
        effects: Optional[Set[int]] = None,
    ):
        self.weapons: Dict[Tuple[Hand, WeaponSlot], int] = {
            (hand, slot): 0 for hand in Hand for slot in WeaponSlot
        }
        self.weapons.update(weapons or {})
        self.current_slots: Dict[Hand, WeaponSlot] = {
            Hand.LEFT: WeaponSlot.PRIMARY,
            Hand.RIGHT: WeaponSlot.PRIMARY,
        }
        self.armor: Dict[ArmorLocation, int] = {loc: 0 for loc in ArmorLocation}
        self.armor.update(armor or {})
        self.rings: Dict[RingSlot, int] = {slot: 0 for slot in RingSlot}
        self.rings.update(rings or {})
        self.effects: Set[int] = set(effects or ())
        self.fail_reads = False
        self.fail_writes = False
        self.writes: List[Tuple[EquipmentType, SlotLocation, Optional[WeaponSlot], int]] = []

    def get(
        self,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot] = None,
    ) -> int:
        if equip_type == EquipmentType.WEAPON:
            return self.weapons[(location, sub_slot)]
        if equip_type == EquipmentType.ARMOR:
            return self.armor[location]
        return self.rings[location]

    def set(
        self,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot],
        value: int,
    ) -> None:
        if equip_type == EquipmentType.WEAPON:
            self.weapons[(location, sub_slot)] = value
        elif equip_type == EquipmentType.ARMOR:
            self.armor[location] = value
        else:
            self.rings[location] = value

    def switch_weapon(self, hand: Hand, slot: WeaponSlot) -> None:
        self.current_slots[hand] = slot


class SimulatedGame:
    """A game process whose world and players can be driven by tests."""

    def __init__(self, players: Optional[Dict[int, SimulatedPlayer]] = None):
        self.players: Dict[int, SimulatedPlayer] = dict(players or {})
        self.world_loaded = True
        self.process_alive = True
        self.generation = 0

    def add_player(self, index: int, player: Optional[SimulatedPlayer] = None) -> SimulatedPlayer:
        if not 0 <= index < MAX_PLAYERS:
            raise ValueError(f"Player index must be 0 to {MAX_PLAYERS - 1}.")
        player = player or SimulatedPlayer()
        self.players[index] = player
        return player

    def remove_player(self, index: int) -> None:
        self.players.pop(index, None)

    def kill_process(self) -> None:
        self.process_alive = False

    def restart_process(self) -> None:
        """Start a new process instance; old hooks become invalid."""
        self.generation += 1
        self.process_alive = True


class SimulatedHook:
    """GameHook over a SimulatedGame, bound to one process generation."""

    def __init__(self, game: SimulatedGame):
        self.game = game
        self.generation = game.generation

    def is_handle_valid(self) -> bool:
        return self.generation == self.game.generation

    def is_terminated(self) -> bool:
        return not self.game.process_alive

    def is_world_loaded(self) -> bool:
        return self.game.world_loaded

    def discover_entities(self) -> List[Tuple[int, SimulatedPlayer]]:
        if not self.game.world_loaded:
            return []
        return sorted(self.game.players.items(), key=lambda item: item[0])

    def read_slot_id(
        self,
        player: SimulatedPlayer,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot] = None,
    ) -> int:
        if player.fail_reads:
            raise HookError(f"Could not read {equip_type.value} {location}.")
        return player.get(equip_type, location, sub_slot)

    def write_slot_id(
        self,
        player: SimulatedPlayer,
        equip_type: EquipmentType,
        location: SlotLocation,
        sub_slot: Optional[WeaponSlot],
        new_id: int,
    ) -> bool:
        if player.fail_writes:
            return False
        player.set(equip_type, location, sub_slot, new_id)
        player.writes.append((equip_type, location, sub_slot, new_id))
        return True

    def get_current_sub_slot(self, player: SimulatedPlayer, hand: Hand) -> WeaponSlot:
        if player.fail_reads:
            raise HookError(f"Could not read current {hand.value}-hand slot.")
        return player.current_slots[hand]

    def has_active_effect(self, player: SimulatedPlayer, effect_id: int) -> bool:
        return effect_id in player.effects

    def get_active_effects(self, player: SimulatedPlayer) -> Set[int]:
        return set(player.effects)


class SimulatedLocator:
    """ProcessLocator for a SimulatedGame."""

    def __init__(self, game: SimulatedGame, fail_searches: int = 0):
        self.game = game
        self.fail_searches = fail_searches  # Searches that time out before the process appears
        self.searches = 0

    def wait_for_process(
        self, timeout_ms: int, interval_ms: int, stop: StopToken
    ) -> Optional[SimulatedHook]:
        self.searches += 1
        if self.fail_searches > 0:
            self.fail_searches -= 1
            return None

        deadline = Deadline(timeout_ms)
        while not stop.is_set():
            if self.game.process_alive:
                return SimulatedHook(self.game)
            if deadline.expired():
                return None
            if stop.wait_ms(min(interval_ms, deadline.remaining_ms())):
                return None
        return None
