"""
Swap Monitor — the heartbeat of the swap kernel.

Polls the attached game every tick, reverts stale temporary swaps and
applies swap triggers for every connected player.

States:
  SEARCHING → WORLD_NOT_LOADED ↔ WORLD_LOADED → (handle lost) → SEARCHING

Only WORLD_LOADED ticks evaluate triggers. Entering WORLD_LOADED requests a
forced revert of every temporary swap, carried out on the first tick that
finds at least one connected player (players may not be available right
after the world loads).

Failure semantics:
- The first process search timing out raises AcquisitionError.
- A lost handle is re-acquired, retrying indefinitely. Ledgers, cooldowns
  and the last world-loaded flag survive the handle replacement.
- Read/write failures are logged and skipped for the tick.
"""

import logging
import threading
from typing import Dict, List, Optional

from swap_kernel.cooldown.bank import CooldownBank
from swap_kernel.hook.interface import GameHook, HookError, ProcessLocator
from swap_kernel.ledger.overrides import OverrideLedger
from swap_kernel.matcher.engine import PlayerEntity, TriggerMatcher
from swap_kernel.models.config import SwapperConfig
from swap_kernel.models.monitor import (
    MonitorState,
    MonitorStatus,
    RevertEvent,
    SwapFiring,
    TickReport,
)
from swap_kernel.models.slots import MAX_PLAYERS, EquipmentType
from swap_kernel.monitor.scheduler import StopToken
from swap_kernel.slots.adapter import SlotAdapter, build_adapters

logger = logging.getLogger(__name__)


class AcquisitionError(Exception):
    """Raised when the game process is not found within the search timeout."""
    pass


class SwapMonitor:
    """
    Owns the hook, the cooldown bank and one override ledger per player.
    Independent instances share no state.
    """

    def __init__(
        self,
        config: SwapperConfig,
        locator: ProcessLocator,
        stop: Optional[StopToken] = None,
    ):
        self.config = config
        self.locator = locator
        self.stop_token = stop or StopToken()

        self.cooldowns = CooldownBank(t.id for t in config.all_triggers())
        self.matcher = TriggerMatcher(self.cooldowns, config.sp_effect_trigger_cooldown_ms)
        self._ledgers: Dict[int, OverrideLedger] = {
            i: OverrideLedger(i) for i in range(MAX_PLAYERS)
        }

        self._hook: Optional[GameHook] = None
        self._adapters: Dict[EquipmentType, SlotAdapter] = {}
        self._attached_once = False
        self._state = MonitorState.STOPPED
        self._world_loaded = False
        self._force_revert_pending = False
        self._players: List[int] = []
        self._ticks = 0
        self._running = False
        self._thread: Optional[threading.Thread] = None
        # Held while a tick mutates ledgers and cooldowns, and while they are read.
        self._lock = threading.Lock()
        self.last_error: Optional[Exception] = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def hook(self) -> Optional[GameHook]:
        return self._hook

    def ledger(self, player_index: int) -> OverrideLedger:
        return self._ledgers[player_index]

    def request_force_revert(self) -> None:
        """Queue a forced revert for the next tick that finds players."""
        self._force_revert_pending = True

    # --- Tick ---

    def tick(self) -> TickReport:
        """Run a single monitor tick."""
        self._ticks += 1

        if not self._ensure_hook():
            return self._report(next_interval_ms=0)

        with self._lock:
            return self._tick_attached()

    def _tick_attached(self) -> TickReport:
        try:
            world_loaded = self._hook.is_world_loaded()
        except HookError as e:
            logger.error("Could not check whether the game is loaded: %s", e)
            return self._report(next_interval_ms=self.config.monitor_interval_ms)

        if not world_loaded:
            if self._state != MonitorState.WORLD_NOT_LOADED:
                logger.warning(
                    "Game is not loaded. Checking again every %d ms...",
                    self.config.game_loaded_interval_ms,
                )
            self._world_loaded = False
            self._state = MonitorState.WORLD_NOT_LOADED
            self._players = []
            return self._report(next_interval_ms=self.config.game_loaded_interval_ms)

        if not self._world_loaded:
            # Game has been (re)loaded. Temporary swaps must be undone.
            self._world_loaded = True
            self._force_revert_pending = True
            logger.info("Game is loaded. Monitoring equipment swap triggers...")
        self._state = MonitorState.WORLD_LOADED

        players = self._discover_players()
        self._players = [p.index for p in players]

        reverts: List[RevertEvent] = []
        firings: List[SwapFiring] = []
        forced = False

        if self._force_revert_pending and players:
            reverts.extend(self._force_revert(players))
            forced = True

        groups = self.config.trigger_groups()
        for player in players:
            ledger = self._ledgers[player.index]
            reverts.extend(ledger.reconcile(player.handle, self._adapters[EquipmentType.WEAPON]))

            try:
                player.active_effects = set(self._hook.get_active_effects(player.handle))
            except HookError as e:
                logger.error("Player %d: could not read active SpEffects: %s", player.index, e)
                continue
            firings.extend(self.matcher.evaluate_all(groups, player, self._adapters, ledger))

        self.cooldowns.decrement_all(self.config.monitor_interval_ms)

        return self._report(
            next_interval_ms=self.config.monitor_interval_ms,
            firings=firings,
            reverts=reverts,
            forced_revert=forced,
        )

    def _report(self, next_interval_ms: int, **kwargs) -> TickReport:
        return TickReport(
            tick=self._ticks,
            state=self._state,
            players=list(self._players),
            next_interval_ms=next_interval_ms,
            **kwargs,
        )

    # --- Hook lifecycle ---

    def _hook_alive(self) -> bool:
        try:
            return self._hook.is_handle_valid() and not self._hook.is_terminated()
        except HookError as e:
            logger.error("Could not validate game process handle: %s", e)
            return False

    def _ensure_hook(self) -> bool:
        """
        Make sure a live hook is attached, searching for the process if needed.
        Returns False only when a stop was requested during the search.
        """
        if self._hook is not None:
            if self._hook_alive():
                return True
            logger.warning("Lost game process handle. Searching again...")
            self._hook = None
            self._adapters = {}

        self._state = MonitorState.SEARCHING
        self._players = []
        while not self.stop_token.is_set():
            hook = self.locator.wait_for_process(
                self.config.process_search_timeout_ms,
                self.config.process_search_interval_ms,
                self.stop_token,
            )
            if hook is not None:
                self._attach(hook)
                return True
            if self.stop_token.is_set():
                break
            if not self._attached_once:
                raise AcquisitionError(
                    f"Game process not found within "
                    f"{self.config.process_search_timeout_ms} ms."
                )
            logger.warning(
                "Game process not found within %d ms. Searching again...",
                self.config.process_search_timeout_ms,
            )
        return False

    def _attach(self, hook: GameHook) -> None:
        self._hook = hook
        self._adapters = build_adapters(hook)
        self._attached_once = True
        logger.info("Attached to game process.")

    def _discover_players(self) -> List[PlayerEntity]:
        try:
            found = self._hook.discover_entities()
        except HookError as e:
            logger.error("Could not discover connected players: %s", e)
            return []

        players = []
        for index, handle in found:
            if not 0 <= index < MAX_PLAYERS:
                logger.error("Ignoring player with invalid index %d.", index)
                continue
            players.append(PlayerEntity(index, handle))
        return players

    # --- Reversion ---

    def _force_revert(self, players: List[PlayerEntity]) -> List[RevertEvent]:
        """Revert every temporary swap of every player, then clear all ledgers."""
        self._force_revert_pending = False
        logger.info("Reverting weapon/armor/ring temporary swaps...")

        present = {p.index: p for p in players}
        events = []
        for index, ledger in self._ledgers.items():
            if index in present:
                events.extend(ledger.revert_all(present[index].handle, self._adapters))
            else:
                ledger.discard_all()
        return events

    # --- Running ---

    def run(self) -> None:
        """
        Tick until the stop token is set. Waits between ticks are interruptible.
        Raises AcquisitionError if the first process search times out.
        """
        self._running = True
        logger.info("Starting swap trigger monitor loop.")
        try:
            while not self.stop_token.is_set():
                report = self.tick()
                if self.stop_token.wait_ms(report.next_interval_ms):
                    break
        finally:
            self._running = False
            self._state = MonitorState.STOPPED
            logger.info("Swap trigger monitor loop stopped.")

    def start(self) -> None:
        """Run the monitor loop on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Swap monitor thread is already running.")
        self.stop_token.clear()
        self.last_error = None
        self._running = True
        self._thread = threading.Thread(
            target=self._run_threaded, name="swap-monitor", daemon=True
        )
        self._thread.start()

    def _run_threaded(self) -> None:
        try:
            self.run()
        except AcquisitionError as e:
            self.last_error = e
            logger.critical("%s Swap monitor stopped.", e)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Set the stop token and wait for the in-flight tick to finish."""
        if self._thread is None:
            raise RuntimeError("Swap monitor thread not started. Cannot stop it.")
        self.stop_token.set()
        self._thread.join(timeout)
        self._thread = None

    # --- Inspection ---

    def status(self) -> MonitorStatus:
        with self._lock:
            return MonitorStatus(
                state=self._state,
                running=self._running,
                ticks=self._ticks,
                world_loaded=self._world_loaded,
                force_revert_pending=self._force_revert_pending,
                players=list(self._players),
                overrides={
                    index: ledger.to_list()
                    for index, ledger in self._ledgers.items()
                    if len(ledger)
                },
                cooldowns=self.cooldowns.snapshot(),
            )

    def overrides(self, player_index: int) -> List[dict]:
        """Active temporary swaps of one player."""
        with self._lock:
            return self._ledgers[player_index].to_list()

    def cooldown_snapshot(self) -> Dict[str, Dict[int, int]]:
        with self._lock:
            return self.cooldowns.snapshot()
