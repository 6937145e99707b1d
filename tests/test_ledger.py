"""Tests for the Temporary Override Ledger."""

from swap_kernel.hook.simulated import SimulatedGame, SimulatedHook, SimulatedPlayer
from swap_kernel.ledger.overrides import OverrideLedger
from swap_kernel.models.monitor import RevertResult
from swap_kernel.models.slots import (
    ArmorLocation,
    EquipmentType,
    Hand,
    OverrideRecord,
    RingSlot,
    WeaponSlot,
    armor_slot,
    ring_slot,
    weapon_slot,
)
from swap_kernel.slots.adapter import build_adapters


def _make_player() -> SimulatedPlayer:
    return SimulatedPlayer(
        weapons={
            (Hand.LEFT, WeaponSlot.PRIMARY): 1001,
            (Hand.LEFT, WeaponSlot.SECONDARY): 2000,
            (Hand.RIGHT, WeaponSlot.PRIMARY): 3001,
            (Hand.RIGHT, WeaponSlot.SECONDARY): 4000,
        },
        armor={ArmorLocation.HEAD: 511},
        rings={RingSlot.FIRST: 101, RingSlot.SECOND: 200},
    )


class TestLedgerRecords:
    def setup_method(self):
        self.ledger = OverrideLedger(0)

    def test_set_overwrites(self):
        """At most one record per logical slot; setting replaces."""
        slot = ring_slot(RingSlot.FIRST)
        self.ledger.set(slot, OverrideRecord(source_id=100, dest_id=101))
        self.ledger.set(slot, OverrideRecord(source_id=101, dest_id=102))
        assert len(self.ledger) == 1
        assert self.ledger.get(slot).source_id == 101
        assert self.ledger.get(slot).dest_id == 102

    def test_has_and_clear(self):
        slot = armor_slot(ArmorLocation.BODY)
        assert self.ledger.has(slot) is False
        self.ledger.set(slot, OverrideRecord(source_id=1, dest_id=2))
        assert self.ledger.has(slot) is True
        self.ledger.clear(slot)
        assert self.ledger.has(slot) is False
        self.ledger.clear(slot)  # no-op

    def test_to_list(self):
        self.ledger.set(
            weapon_slot(Hand.LEFT),
            OverrideRecord(source_id=1000, dest_id=1001, sub_slot=WeaponSlot.PRIMARY),
        )
        assert self.ledger.to_list() == [{
            "equip_type": "weapon",
            "location": "left",
            "source_id": 1000,
            "dest_id": 1001,
            "sub_slot": "primary",
        }]


class TestRevert:
    def setup_method(self):
        self.game = SimulatedGame()
        self.player = self.game.add_player(0, _make_player())
        self.adapters = build_adapters(SimulatedHook(self.game))
        self.ledger = OverrideLedger(0)

    def test_revert_restores_source(self):
        slot = weapon_slot(Hand.LEFT)
        self.ledger.set(slot, OverrideRecord(source_id=1000, dest_id=1001, sub_slot=WeaponSlot.PRIMARY))

        event = self.ledger.revert(slot, self.player, self.adapters[EquipmentType.WEAPON])

        assert event.result == RevertResult.REVERTED
        assert self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] == 1000
        assert self.ledger.has(slot) is False

    def test_revert_without_record_is_noop(self, caplog):
        """Reverting an empty slot reports an error and writes nothing."""
        event = self.ledger.revert(
            ring_slot(RingSlot.SECOND), self.player, self.adapters[EquipmentType.RING]
        )
        assert event.result == RevertResult.NO_OVERRIDE
        assert self.player.writes == []
        assert any(r.levelname == "ERROR" for r in caplog.records)

    def test_revert_refuses_when_value_changed(self):
        """Someone else wrote the slot since; the record is kept and nothing is written."""
        slot = armor_slot(ArmorLocation.HEAD)
        self.ledger.set(slot, OverrideRecord(source_id=510, dest_id=520))

        event = self.ledger.revert(slot, self.player, self.adapters[EquipmentType.ARMOR])

        assert event.result == RevertResult.MISMATCH
        assert self.player.armor[ArmorLocation.HEAD] == 511
        assert self.player.writes == []
        assert self.ledger.has(slot) is True

    def test_failed_write_keeps_record_for_retry(self):
        slot = ring_slot(RingSlot.FIRST)
        self.ledger.set(slot, OverrideRecord(source_id=100, dest_id=101))
        self.player.fail_writes = True

        event = self.ledger.revert(slot, self.player, self.adapters[EquipmentType.RING])
        assert event.result == RevertResult.WRITE_FAILED
        assert self.ledger.has(slot) is True

        self.player.fail_writes = False
        event = self.ledger.revert(slot, self.player, self.adapters[EquipmentType.RING])
        assert event.result == RevertResult.REVERTED
        assert self.player.rings[RingSlot.FIRST] == 100

    def test_failed_read_keeps_record(self):
        slot = ring_slot(RingSlot.FIRST)
        self.ledger.set(slot, OverrideRecord(source_id=100, dest_id=101))
        self.player.fail_reads = True

        event = self.ledger.revert(slot, self.player, self.adapters[EquipmentType.RING])
        assert event.result == RevertResult.READ_FAILED
        assert self.ledger.has(slot) is True


class TestReconcile:
    def setup_method(self):
        self.game = SimulatedGame()
        self.player = self.game.add_player(0, _make_player())
        self.adapters = build_adapters(SimulatedHook(self.game))
        self.weapons = self.adapters[EquipmentType.WEAPON]
        self.ledger = OverrideLedger(0)
        self.ledger.set(
            weapon_slot(Hand.LEFT),
            OverrideRecord(source_id=1000, dest_id=1001, sub_slot=WeaponSlot.PRIMARY),
        )
        self.ledger.set(
            weapon_slot(Hand.RIGHT),
            OverrideRecord(source_id=3000, dest_id=3001, sub_slot=WeaponSlot.PRIMARY),
        )

    def test_no_expiry_while_equipped(self):
        events = self.ledger.reconcile(self.player, self.weapons)
        assert events == []
        assert len(self.ledger) == 2

    def test_switching_one_hand_reverts_only_that_hand(self):
        self.player.switch_weapon(Hand.LEFT, WeaponSlot.SECONDARY)

        events = self.ledger.reconcile(self.player, self.weapons)

        assert [e.location for e in events] == [Hand.LEFT]
        assert events[0].result == RevertResult.REVERTED
        assert self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] == 1000
        assert self.ledger.has(weapon_slot(Hand.LEFT)) is False
        assert self.ledger.get(weapon_slot(Hand.RIGHT)).dest_id == 3001
        assert self.player.weapons[(Hand.RIGHT, WeaponSlot.PRIMARY)] == 3001

    def test_mismatch_is_retried_next_pass(self):
        self.player.switch_weapon(Hand.LEFT, WeaponSlot.SECONDARY)
        self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] = 9999

        events = self.ledger.reconcile(self.player, self.weapons)
        assert events[0].result == RevertResult.MISMATCH
        assert self.ledger.has(weapon_slot(Hand.LEFT)) is True

        # The game puts the temporary weapon back; next pass reverts it.
        self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] = 1001
        events = self.ledger.reconcile(self.player, self.weapons)
        assert events[0].result == RevertResult.REVERTED
        assert self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] == 1000

    def test_armor_and_ring_never_expire(self):
        self.ledger.set(armor_slot(ArmorLocation.HEAD), OverrideRecord(source_id=510, dest_id=511))
        self.ledger.set(ring_slot(RingSlot.FIRST), OverrideRecord(source_id=100, dest_id=101))
        self.player.switch_weapon(Hand.LEFT, WeaponSlot.SECONDARY)
        self.player.switch_weapon(Hand.RIGHT, WeaponSlot.SECONDARY)

        self.ledger.reconcile(self.player, self.weapons)

        assert self.ledger.has(armor_slot(ArmorLocation.HEAD)) is True
        assert self.ledger.has(ring_slot(RingSlot.FIRST)) is True
        assert len(self.ledger) == 2


class TestRevertAll:
    def setup_method(self):
        self.game = SimulatedGame()
        self.player = self.game.add_player(0, _make_player())
        self.adapters = build_adapters(SimulatedHook(self.game))
        self.ledger = OverrideLedger(0)

    def test_forced_revert_of_every_category(self):
        self.ledger.set(
            weapon_slot(Hand.LEFT),
            OverrideRecord(source_id=1000, dest_id=1001, sub_slot=WeaponSlot.PRIMARY),
        )
        self.ledger.set(armor_slot(ArmorLocation.HEAD), OverrideRecord(source_id=510, dest_id=511))
        self.ledger.set(ring_slot(RingSlot.FIRST), OverrideRecord(source_id=100, dest_id=101))

        events = self.ledger.revert_all(self.player, self.adapters)

        assert len(events) == 3
        assert all(e.forced for e in events)
        assert all(e.result == RevertResult.REVERTED for e in events)
        assert self.player.weapons[(Hand.LEFT, WeaponSlot.PRIMARY)] == 1000
        assert self.player.armor[ArmorLocation.HEAD] == 510
        assert self.player.rings[RingSlot.FIRST] == 100
        assert len(self.ledger) == 0

    def test_forced_revert_clears_even_on_mismatch(self, caplog):
        self.ledger.set(ring_slot(RingSlot.SECOND), OverrideRecord(source_id=150, dest_id=151))

        events = self.ledger.revert_all(self.player, self.adapters)

        assert events[0].result == RevertResult.MISMATCH
        assert self.player.rings[RingSlot.SECOND] == 200
        assert len(self.ledger) == 0
        assert any(r.levelname == "WARNING" for r in caplog.records)

    def test_forced_revert_with_nothing_recorded(self, caplog):
        caplog.set_level("INFO")
        events = self.ledger.revert_all(self.player, self.adapters)
        assert events == []
        assert self.player.writes == []
        assert "no temporary swaps to force-revert" in caplog.text

    def test_discard_all(self):
        self.ledger.set(ring_slot(RingSlot.FIRST), OverrideRecord(source_id=100, dest_id=101))
        assert self.ledger.discard_all() == 1
        assert len(self.ledger) == 0
        assert self.player.writes == []
