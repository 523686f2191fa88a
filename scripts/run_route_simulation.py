"""
Replay a route from the command line and print every progress update.

Example:
    python -m scripts.run_route_simulation --start 52.517037,13.388860 \
        --end 52.529407,13.397634 --preset CYCLING --repeat
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from navigation import (
    NavigationController,
    NavigationSpeed,
    NavigationState,
    Route,
    RouteValidationError,
    validate_route,
)
from routing import GeoPoint, RoutingProvider, format_duration

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)


def parse_point(text: str, label: str) -> GeoPoint:
    try:
        lat, lon = (float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'lat,lon', got {text!r}")
    return GeoPoint(lat, lon, label)


def build_route(args: argparse.Namespace) -> Route:
    speed = args.speed if args.speed is not None else NavigationSpeed[args.preset]
    via = [parse_point(p, f"Via {i + 1}") for i, p in enumerate(args.via or [])]
    route = Route.new(
        start=parse_point(args.start, "Start"),
        end=parse_point(args.end, "End"),
        speed_mps=speed,
        duration_ms=Route.duration_from(args.minutes, args.seconds),
        repeating=args.repeat,
        name=args.name,
        waypoints=via,
    )
    return route


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Simulate movement along a route")
    ap.add_argument("--start", required=True, help="start point as lat,lon")
    ap.add_argument("--end", required=True, help="end point as lat,lon")
    ap.add_argument("--via", action="append", help="intermediate point lat,lon (repeatable); skips the routing lookup")
    ap.add_argument("--name", default=None)
    ap.add_argument("--preset", choices=[s.name for s in NavigationSpeed], default="WALKING")
    ap.add_argument("--speed", type=float, default=None, help="speed in m/s (overrides --preset)")
    ap.add_argument("--minutes", type=int, default=0, help="duration limit, minutes")
    ap.add_argument("--seconds", type=int, default=0, help="duration limit, seconds")
    ap.add_argument("--repeat", action="store_true")
    ap.add_argument("--offline", action="store_true", help="never call the routing service")
    ap.add_argument("--every", type=int, default=20, help="print one line per N ticks")
    args = ap.parse_args(argv)

    try:
        route = validate_route(build_route(args))
    except (RouteValidationError, argparse.ArgumentTypeError) as e:
        print(f"[Sim] Invalid route: {e}")
        return 2

    controller = NavigationController(provider=RoutingProvider(use_network=not args.offline))

    ticks = {"count": 0}

    def on_progress(progress) -> None:
        if progress is None:
            return
        ticks["count"] += 1
        if ticks["count"] % args.every and progress.progress_percent < 100.0:
            return
        position = progress.position
        print(
            f"  {progress.progress_percent:6.2f}%  "
            f"{position.latitude:.6f}, {position.longitude:.6f}  "
            f"elapsed {format_duration(progress.elapsed_ms)}  "
            f"remaining {format_duration(progress.remaining_ms)}"
        )

    controller.progress.subscribe(on_progress)
    controller.route_waypoints.subscribe(
        lambda waypoints: waypoints and print(f"[Sim] Path ready: {len(waypoints)} waypoints")
    )

    print(f"[Sim] Starting '{route.name}' at {route.speed_mps} m/s")
    controller.start(route)

    try:
        while not controller.state.wait_for(lambda s: s is NavigationState.STOPPED, timeout=1.0):
            pass
    except KeyboardInterrupt:
        print("\n[Sim] Interrupted, stopping.")
        controller.stop()

    print("[Sim] Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
