"""
Swap Kernel API — FastAPI endpoints.

Operator surface for a monitor running on a background thread:
- Status and configuration inspection
- Temporary swap (override) and cooldown inspection
- Monitor control (start, stop, single tick)
- Forced revert requests
"""

from typing import Optional

from fastapi import FastAPI, HTTPException

from swap_kernel.hook.interface import ProcessLocator
from swap_kernel.hook.simulated import SimulatedGame, SimulatedLocator
from swap_kernel.models.config import SwapperConfig
from swap_kernel.models.slots import MAX_PLAYERS
from swap_kernel.monitor.loop import AcquisitionError, SwapMonitor


# --- Application Factory ---

def create_app(
    monitor: Optional[SwapMonitor] = None,
    config: Optional[SwapperConfig] = None,
    locator: Optional[ProcessLocator] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Swap Kernel API",
        description="Equipment swap trigger monitor",
        version="0.1.0",
    )

    if monitor is None:
        monitor = SwapMonitor(
            config=config or SwapperConfig(),
            locator=locator or SimulatedLocator(SimulatedGame()),
        )
    app.state.monitor = monitor

    # === STATUS ===

    @app.get("/status")
    def get_status():
        """Current monitor state, ledgers and cooldowns."""
        status = monitor.status().model_dump(mode="json")
        status["last_error"] = str(monitor.last_error) if monitor.last_error else None
        return status

    @app.get("/config")
    def get_config():
        """Timing settings and trigger counts."""
        data = monitor.config.model_dump(
            mode="json",
            include={
                "process_search_timeout_ms",
                "process_search_interval_ms",
                "monitor_interval_ms",
                "game_loaded_interval_ms",
                "sp_effect_trigger_cooldown_ms",
            },
        )
        data["trigger_counts"] = monitor.config.trigger_counts()
        return data

    @app.get("/triggers")
    def list_triggers():
        """All configured swap triggers."""
        return [
            {**t.model_dump(mode="json"), "description": t.describe()}
            for t in monitor.config.all_triggers()
        ]

    # === OVERRIDES & COOLDOWNS ===

    @app.get("/overrides")
    def list_overrides():
        """Active temporary swaps per player."""
        return monitor.status().model_dump(mode="json")["overrides"]

    @app.get("/overrides/{player_index}")
    def get_player_overrides(player_index: int):
        """Active temporary swaps for one player."""
        if not 0 <= player_index < MAX_PLAYERS:
            raise HTTPException(404, "Player not found")
        return monitor.overrides(player_index)

    @app.post("/overrides/revert")
    def request_revert():
        """Queue a forced revert of every temporary swap."""
        monitor.request_force_revert()
        return {"status": "pending"}

    @app.get("/cooldowns")
    def list_cooldowns():
        """Active SpEffect trigger cooldowns."""
        return monitor.cooldown_snapshot()

    # === MONITOR CONTROL ===

    @app.post("/monitor/tick")
    def trigger_tick():
        """Run one tick synchronously (for testing)."""
        if monitor.running:
            raise HTTPException(409, "Monitor is running; stop it before ticking manually")
        try:
            report = monitor.tick()
        except AcquisitionError as e:
            raise HTTPException(503, str(e))
        return report.model_dump(mode="json")

    @app.post("/monitor/start")
    def start_monitor():
        """Start the monitor loop on a background thread."""
        if monitor.running:
            raise HTTPException(409, "Monitor already running")
        monitor.start()
        return {"status": "running"}

    @app.post("/monitor/stop")
    def stop_monitor():
        """Stop the monitor loop, waiting for the current tick."""
        if not monitor.running:
            raise HTTPException(409, "Monitor not running")
        monitor.stop()
        return {"status": "stopped"}

    return app
