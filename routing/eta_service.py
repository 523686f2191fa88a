#Purpose: ETA estimation policy.
#Converts a route's speed/duration and its resolved path into the time budget
#used by:
#the simulator (elapsed/remaining accounting, resume anchoring)
#progress displays ("MM:SS")
#Keeps timing arithmetic separate from route computation and the tick loop.

from __future__ import annotations


def estimated_total_time_ms(total_distance_m: float, speed_mps: float, duration_ms: int = 0) -> int:
    """
    Time budget of one run in milliseconds.

    An explicit duration wins; otherwise distance / speed. Assumes constant
    speed along the whole path.
    """
    if duration_ms > 0:
        return int(duration_ms)
    return int(total_distance_m / speed_mps * 1000)


def remaining_time_ms(estimated_total_ms: int, elapsed_ms: int) -> int:
    return max(0, estimated_total_ms - elapsed_ms)


def format_duration(milliseconds: int) -> str:
    """Render milliseconds as MM:SS (minutes are not wrapped at 60)."""
    total_seconds = max(0, int(milliseconds)) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"
