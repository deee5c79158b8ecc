#!/usr/bin/env python3
"""Live route tracker for manual checks against a running tracking server.

Connects to the server, selects a route and prints every fleet update
until interrupted or ``--duration`` elapses. With ``--driver`` it logs in
as that vehicle and publishes the static position given by ``--lat/--lng``.

Server URL sourcing:
- --base-url
- BUSTRACK_BASE_URL (default http://localhost:4000)
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import Mapping
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybustrack import (  # noqa: E402
    BusTrackerClient,
    BusTrackError,
    Coordinate,
    FleetUpdate,
    Notice,
    StaticGeolocationProvider,
    TrackerConfig,
    VehicleRecord,
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", help="Tracking server base URL (overrides BUSTRACK_BASE_URL).")
    parser.add_argument("--route", help="Route id to track. Defaults to the first route the server lists.")
    parser.add_argument("--driver", metavar="VEHICLE_ID", help="Log in as the driver of this vehicle.")
    parser.add_argument("--occupancy", type=int, default=0, help="Passenger count reported as driver.")
    parser.add_argument("--lat", type=float, help="Static latitude for this device.")
    parser.add_argument("--lng", type=float, help="Static longitude for this device.")
    parser.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (0 = until Ctrl-C).")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging for pybustrack.")
    return parser.parse_args()


def _print_fleet(update: FleetUpdate, vehicles: Mapping[str, VehicleRecord]) -> None:
    print(f"[{update.source.value}] route={update.route_id} batch={len(update.buses)} tracked={len(vehicles)}")
    for record in sorted(vehicles.values(), key=lambda r: r.vehicle_id):
        where = f"{record.coordinates.lat:.5f},{record.coordinates.lng:.5f}" if record.coordinates else "no fix"
        print(
            f"  {record.vehicle_id:<12} {record.status.value:<11} {where:<22} "
            f"{record.speed:5.1f} km/h  occ={record.occupancy_level.value:<8} {record.format_last_update()}"
        )


def _print_notice(notice: Notice) -> None:
    print(f"! {notice.kind.value}: {notice.message}")


async def _run(args: argparse.Namespace) -> int:
    overrides = {"base_url": args.base_url} if args.base_url else {}
    config = TrackerConfig.from_env(**overrides)

    provider = None
    if args.lat is not None and args.lng is not None:
        provider = StaticGeolocationProvider(Coordinate(lat=args.lat, lng=args.lng))

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with BusTrackerClient(
        config,
        geolocation=provider,
        on_notice=_print_notice,
        on_fleet_update=_print_fleet,
    ) as client:
        routes = await client.list_routes()
        if not routes:
            print("No routes returned by server")
            return 2
        for route in routes:
            print(f"route {route.route_id}: {route.route_name} ({len(route.stops)} stops)")

        if args.driver:
            await client.choose_role("driver")
            client.set_occupancy(args.occupancy)
            await client.login(args.driver)
            print(f"Logged in as driver of {args.driver}; publishing every {client.sampling_interval}s")
        else:
            await client.choose_role("commuter")

        route_id = args.route or routes[0].route_id
        try:
            await client.select_route(route_id)
        except BusTrackError as exc:
            print(f"Cannot track route {route_id!r}: {exc}")
            return 2

        timeout = args.duration if args.duration > 0 else None
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout)

        view = client.focus()
        print(f"Final view: {view.mode.value} center={view.center.as_pair()} points={len(view.points)}")
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
