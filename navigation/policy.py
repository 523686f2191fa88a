"""
Purpose: Central configuration for the route simulator.
What it does:

Stores all tunable timings/caps for the tick loop:

TICK_INTERVAL_MS = 50
ROAD_MIN_STEPS = 100
STRAIGHT_MIN_STEPS = 20
REPEAT_PAUSE_MS = 1000

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationPolicy:
    """
    Central configuration for the simulation tick loop.
    """

    # --- Tick cadence ---
    # One position update per tick. Step count is derived from the distance
    # covered per tick at the route's speed.
    tick_interval_ms: int = 50

    # --- Smoothness floors ---
    # Minimum number of steps, so very short or very slow routes still animate.
    # Road-following paths (>2 waypoints) get more steps than straight lines.
    road_min_steps: int = 100
    straight_min_steps: int = 20

    # --- Repetition ---
    # Pause between the end of one lap and the start of the next.
    repeat_pause_ms: int = 1000

    # --- Worker lifecycle ---
    # How long start()/stop() wait for a cancelled worker thread to exit.
    join_timeout_s: float = 1.0

    @property
    def tick_interval_s(self) -> float:
        return self.tick_interval_ms / 1000.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be > 0")

        if self.road_min_steps <= 0 or self.straight_min_steps <= 0:
            raise ValueError("minimum step counts must be > 0")

        if self.repeat_pause_ms < 0:
            raise ValueError("repeat_pause_ms must be >= 0")

        if self.join_timeout_s <= 0:
            raise ValueError("join_timeout_s must be > 0")


def default_simulation_policy() -> SimulationPolicy:
    """
    Convenience factory for the default policy.
    """
    p = SimulationPolicy()
    p.validate()
    return p
