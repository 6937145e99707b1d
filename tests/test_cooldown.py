"""Tests for the Cooldown Bank."""

import pytest

from swap_kernel.cooldown.bank import CooldownBank


class TestCooldownBank:
    def setup_method(self):
        self.bank = CooldownBank(["LeftWeaponTriggers[0]", "RingTriggers[0]"])

    def test_starts_at_zero(self):
        for player_index in range(4):
            assert self.bank.get("LeftWeaponTriggers[0]", player_index) == 0
            assert self.bank.is_cooling_down("LeftWeaponTriggers[0]", player_index) is False

    def test_reset_is_per_player(self):
        self.bank.reset("LeftWeaponTriggers[0]", 1, 500)
        assert self.bank.get("LeftWeaponTriggers[0]", 1) == 500
        assert self.bank.get("LeftWeaponTriggers[0]", 0) == 0
        assert self.bank.get("RingTriggers[0]", 1) == 0

    def test_decrement_floors_at_zero(self):
        self.bank.reset("RingTriggers[0]", 2, 25)
        self.bank.decrement_all(10)
        assert self.bank.get("RingTriggers[0]", 2) == 15
        self.bank.decrement_all(10)
        assert self.bank.get("RingTriggers[0]", 2) == 5
        self.bank.decrement_all(10)
        assert self.bank.get("RingTriggers[0]", 2) == 0
        self.bank.decrement_all(10)
        assert self.bank.get("RingTriggers[0]", 2) == 0

    def test_invalid_player_index(self):
        with pytest.raises(ValueError):
            self.bank.get("RingTriggers[0]", 4)
        with pytest.raises(ValueError):
            self.bank.reset("RingTriggers[0]", -1, 100)

    def test_reset_all(self):
        self.bank.reset_all(300)
        assert self.bank.get("LeftWeaponTriggers[0]", 3) == 300
        self.bank.reset_all()
        assert self.bank.snapshot() == {}

    def test_snapshot_lists_active_only(self):
        self.bank.reset("LeftWeaponTriggers[0]", 0, 100)
        self.bank.reset("LeftWeaponTriggers[0]", 3, 40)
        assert self.bank.snapshot() == {"LeftWeaponTriggers[0]": {0: 100, 3: 40}}

    def test_unregistered_trigger_reads_zero(self):
        assert self.bank.get("HeadArmorTriggers[9]", 0) == 0
        self.bank.register("HeadArmorTriggers[9]")
        self.bank.reset("HeadArmorTriggers[9]", 0, 10)
        assert self.bank.is_cooling_down("HeadArmorTriggers[9]", 0) is True
