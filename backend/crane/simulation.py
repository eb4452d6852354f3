"""
Shared simulation state and the fixed-step physics loop.

The crane and the server settings each sit behind their own lock. No code
path holds both at once, and neither is held across a sleep or a send.
"""
import logging
import threading
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MS = 16  # ~60 fps, excluding overhead
DEFAULT_TICK_MS = 16


@dataclass
class ServerSettings:
    refresh_ms: int = DEFAULT_REFRESH_MS


class SharedState:
    """Crane and server settings shared by the tick thread and every client."""

    def __init__(self, crane, settings=None):
        self.crane = crane
        self.crane_lock = threading.Lock()
        self.settings = settings if settings is not None else ServerSettings()
        self.settings_lock = threading.Lock()

    def snapshot(self):
        """CraneState read under a single crane lock acquisition."""
        with self.crane_lock:
            return self.crane.get_state()

    def refresh_ms(self):
        with self.settings_lock:
            return self.settings.refresh_ms

    def set_refresh_ms(self, ms):
        with self.settings_lock:
            self.settings.refresh_ms = ms


class SimulationLoop:
    """Advance the shared crane by a fixed timestep on a background thread.

    Args:
        shared: SharedState holding the crane
        tick_ms: Physics timestep in milliseconds
    """

    def __init__(self, shared, tick_ms=DEFAULT_TICK_MS):
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")
        self.shared = shared
        self.tick_ms = tick_ms
        self.dt = tick_ms / 1000.0

        self._stop_event = threading.Event()
        self._thread = None

        self.timing_stats = {
            "tick_count": 0,
            "avg_tick_time": 0.0,
            "overruns": 0
        }

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def step(self):
        """Run one physics tick under the crane lock."""
        with self.shared.crane_lock:
            self.shared.crane.update_state(self.dt)

    def start(self):
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name='crane-simulation', daemon=True)
        self._thread.start()
        logger.info("Simulation loop started at %d ms per tick", self.tick_ms)

    def stop(self, timeout=2.0):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _run(self):
        while not self._stop_event.is_set():
            loop_start = time.perf_counter()

            try:
                self.step()
            except Exception:
                logger.exception("Simulation tick failed")

            elapsed = time.perf_counter() - loop_start
            self.timing_stats["tick_count"] += 1
            self.timing_stats["avg_tick_time"] = (
                self.timing_stats["avg_tick_time"] * 0.95 + elapsed * 1000 * 0.05
            )
            if elapsed > self.dt:
                self.timing_stats["overruns"] += 1

            sleep_time = self.dt - elapsed
            if sleep_time > 0:
                self._stop_event.wait(sleep_time)
