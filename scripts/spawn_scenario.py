#!/usr/bin/env python3
"""
Spawn a synthetic scenario on the demo map from a YAML configuration file.

Usage:
    python -m scripts.spawn_scenario --config configs/spawn_demo.yaml --people 50000

Options:
    --config PATH       Path to YAML configuration file (required)
    --people INT        Override number of people from config
    --seed INT          Override random seed from config
    --output-dir PATH   Where to write trips.csv and report.json
    --sequential        Validate on one thread
    --verbose           Enable verbose logging
    --dry-run           Parse config and show settings without running
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import asdict, replace
from pathlib import Path

import numpy as np
import yaml

from src.simulation import (
    MapView,
    Person,
    Position,
    Scheduler,
    SpawnConfig,
    TripLedger,
    create_demo_map,
    load_config,
    setup_logging,
)
from src.simulation.engine import SimulationEngine
from src.trips import (
    Border,
    BuildingEndpoint,
    BorderEndpoint,
    CarID,
    JustWalking,
    ParkNear,
    SidewalkSpot,
    TripPurpose,
    TripRequest,
    TripSpawner,
    UsingBike,
    UsingParkedCar,
    UsingTransit,
    VehicleAppearing,
    VehicleType,
    validate_batch,
)

logger = logging.getLogger(__name__)

MODES = ["walk", "bike", "drive", "transit", "border"]
MODE_WEIGHTS = [0.2, 0.15, 0.4, 0.15, 0.1]
CANCEL_PROBABILITY = 0.05


def generate_requests(
    network: MapView,
    n_people: int,
    rng: np.random.Generator,
) -> tuple[list[Person], list[TripRequest]]:
    """
    Create one person and one morning trip request per person.

    Returns:
        (people, requests)
    """
    buildings = sorted(network.buildings)
    purposes = list(TripPurpose)

    people = []
    requests = []
    for person_id in range(n_people):
        start_b, goal_b = (
            int(b) for b in rng.choice(buildings, size=2, replace=False)
        )
        mode = rng.choice(MODES, p=MODE_WEIGHTS)
        vehicle_type = VehicleType.BIKE if mode == "bike" else VehicleType.CAR
        vehicle = CarID(person_id, vehicle_type)
        trip_start = BuildingEndpoint(start_b)

        if mode == "walk":
            spec = JustWalking(
                SidewalkSpot.building(start_b, network),
                SidewalkSpot.building(goal_b, network),
            )
        elif mode == "bike":
            goal = ParkNear(goal_b) if rng.random() < 0.8 else Border(3, 5)
            spec = UsingBike(vehicle, start_b, goal)
        elif mode == "drive":
            spec = UsingParkedCar(vehicle, start_b, ParkNear(goal_b))
        elif mode == "transit":
            spec = UsingTransit(
                SidewalkSpot.building(start_b, network),
                SidewalkSpot.building(goal_b, network),
                route_id=0,
                boarding_stop=0,
                alighting_stop=1 if rng.random() < 0.7 else None,
            )
        else:
            spec = VehicleAppearing(Position(0, 10.0), Border(3, 5), vehicle)
            trip_start = BorderEndpoint(0)

        people.append(Person(person_id, vehicles=[vehicle]))
        requests.append(
            TripRequest(
                person=person_id,
                start_time=float(rng.uniform(6 * 3600, 10 * 3600)),
                spec=spec,
                trip_start=trip_start,
                purpose=purposes[int(rng.integers(len(purposes)))],
                cancelled=bool(rng.random() < CANCEL_PROBABILITY),
            )
        )

    return people, requests


def run_scenario(config: SpawnConfig, output_dir: Path) -> dict:
    """Validate, commit and start every trip in a synthetic scenario."""
    rng = np.random.default_rng(config.random_seed)
    network = create_demo_map()
    ledger = TripLedger()
    scheduler = Scheduler()

    people, requests = generate_requests(network, config.n_people, rng)
    for person in people:
        ledger.add_person(person)

    start_time = time.time()
    plans = validate_batch(requests, network, config)
    logger.info(f"Validated {len(plans):,} trips in {time.time() - start_time:.2f}s")

    spawner = TripSpawner(config)
    spawner.schedule_trips(plans)
    report = spawner.finalize(network, ledger, scheduler)

    result = SimulationEngine(network, ledger, scheduler).run()
    logger.info(f"Started {len(result.started):,} trips by {result.end_time:.0f}s")

    save_results(ledger, report.summary(), config, output_dir)
    return {**report.summary(), **result.metrics}


def save_results(
    ledger: TripLedger, summary: dict, config: SpawnConfig, output_dir: Path
) -> None:
    """Save the trip table, spawn report and config used."""
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = output_dir / "trips.csv"
    ledger.to_dataframe().to_csv(csv_path, index=False)
    logger.info(f"Saved trip data to {csv_path}")

    with open(output_dir / "report.json", "w") as f:
        json.dump(summary, f, indent=2)

    with open(output_dir / "config_used.yaml", "w") as f:
        yaml.dump({"spawn": asdict(config)}, f, default_flow_style=False)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Spawn a synthetic scenario from a YAML configuration file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--people",
        type=int,
        default=None,
        help="Override number of people from config",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random seed from config",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("results/spawn"),
        help="Output directory",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Validate on a single thread",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and show settings without running",
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (yaml.YAMLError, ValueError) as e:
        print(f"Error parsing config: {e}", file=sys.stderr)
        return 1

    # CLI overrides
    if args.people is not None:
        config = replace(config, n_people=args.people)
    if args.seed is not None:
        config = replace(config, random_seed=args.seed)
    if args.sequential:
        config = replace(config, parallel=False)

    setup_logging(config, args.verbose)

    print(f"Spawning scenario from {args.config}")
    print(f"  People: {config.n_people:,}")
    print(f"  Seed: {config.random_seed}")
    print(f"  Parallel: {config.parallel} (workers: {config.n_workers or 'auto'})")
    print(f"  Output: {args.output_dir}")
    print()

    if args.dry_run:
        print("Dry run - not spawning")
        print(yaml.dump({"spawn": asdict(config)}, default_flow_style=False))
        return 0

    try:
        summary = run_scenario(config, args.output_dir)
    except KeyboardInterrupt:
        print("\nSpawning interrupted by user.")
        return 130

    print("Results:")
    for key in ("registered", "scheduled", "cancelled", "failed"):
        print(f"  {key}: {summary[key]:,}")
    print(f"  Bike trips that walked instead: {summary['fallback_bike_to_walk']:,}")
    print(f"\nResults saved to: {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
