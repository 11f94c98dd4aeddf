#!/usr/bin/env python
"""Example: Fly every maneuver level with its scripted autopilot.

This script demonstrates the separation between:
- Simulation infrastructure (maneuver/) - orbit, fuel and mission logic
- Flight software (pilot/) - autopilots that only read telemetry and command

Each level is flown to completion and the recorded telemetry is summarized.
Pass `--csv DIR` to write each run's telemetry to DIR/<level>.csv.

Usage:
    uv run python scripts/fly_missions.py
    uv run python scripts/fly_missions.py --csv outputs --seed 3
"""

import argparse
import logging
from pathlib import Path

from maneuver import ManeuverEngine, MissionRecorder, OrbitalIntegrator, get_level, list_levels
from pilot import AUTOPILOTS, execute


def fly_level(name: str, seed: int, max_ticks: int) -> tuple[ManeuverEngine, MissionRecorder]:
    """Fly one level, recording every tick."""
    config = get_level(name)
    engine = ManeuverEngine(config, seed=seed)
    autopilot = AUTOPILOTS[name].from_level(config)
    recorder = MissionRecorder()

    telemetry = engine.telemetry()
    recorder.record(telemetry)
    for _ in range(max_ticks):
        if telemetry.status.is_terminal:
            break
        execute(engine, autopilot.compute(telemetry))
        telemetry = engine.step()
        recorder.record(telemetry)

    # Fired burns can end the mission between ticks
    recorder.record(engine.telemetry())
    return engine, recorder


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--seed", type=int, default=0, help="Alignment drift seed")
    parser.add_argument("--max-ticks", type=int, default=50_000, help="Tick budget per level")
    parser.add_argument("--csv", type=Path, default=None, help="Directory for telemetry CSVs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log mission events")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("MANEUVER AUTOPILOT RUNS")
    print("=" * 60)

    for name in list_levels():
        config = get_level(name)
        engine, recorder = fly_level(name, args.seed, args.max_ticks)
        final = recorder.frames[-1]

        period = OrbitalIntegrator(config.orbit).ticks_per_revolution(config.start_apogee)

        print(f"\n{config.title}")
        print("-" * 60)
        print(f"  Status:      {final.status.value.upper()}")
        if final.failure is not None:
            print(f"  Failure:     {final.failure.code} ({final.failure.cause})")
        print(f"  Ticks:       {final.tick} (orbit period at start: {period} ticks)")
        print(f"  Path:        {' -> '.join(s.value for s in engine.machine.history)}")
        print(f"  Stage:       {final.stage_index} ({final.stage_label})")
        print(f"  Apogee:      {final.apogee:,.0f} km")
        print(f"  Velocity:    {final.velocity:.3f} km/s")
        print(f"  Fuel left:   {final.fuel:.1f} %")
        if final.message is not None:
            print(f"  Message:     {final.message.text}")

        if args.csv is not None:
            args.csv.mkdir(parents=True, exist_ok=True)
            path = args.csv / f"{name}.csv"
            recorder.to_dataframe().write_csv(path)
            print(f"  Telemetry:   {path}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
