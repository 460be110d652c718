#!/usr/bin/env python
"""
Run Hydraulic Press Simulator: one duty cycle + performance advice

Usage:
    python scripts/run_simulator.py [--bore 6.5 --rod 3.0 ...] [--target-cycle-time -10]
    python scripts/run_simulator.py --coefficients-url http://host/ml_coefficients.json
    python scripts/run_simulator.py --artifact models/ml_coefficients.json --verbose

Output (stdout):
    - system summary (areas, required pressure, displacement, relief setting, maxima)
    - energy per phase
    - AI prediction (pressure, efficiency, cycle time, confidence, source)
    - ranked parameter suggestions for the requested goal
"""

import sys
import argparse
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hydropress.advisor.cache import CoefficientCache
from hydropress.advisor.model import PerformanceModel
from hydropress.advisor.sensitivity import Goal, SensitivityAdvisor
from hydropress.config import ModelSourceConfig, PressConfig
from hydropress.core.types import InputModel
from hydropress.energy import aggregate_energy_by_phase
from hydropress.simulator import run_simulation
from hydropress.summary import summarize_cycle


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Simulate a hydraulic press duty cycle and suggest parameter changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default press, no goal
  python scripts/run_simulator.py

  # Ask for a 10% shorter cycle
  python scripts/run_simulator.py --target-cycle-time -10

  # Larger bore, heavier press, +5% efficiency goal
  python scripts/run_simulator.py --bore 8 --holding-load 12 --target-efficiency 5
        """
    )

    parser.add_argument("--bore", type=float, default=6.5, help="Bore diameter, cm (default: 6.5)")
    parser.add_argument("--rod", type=float, default=3.0, help="Rod diameter, cm (default: 3.0)")
    parser.add_argument("--dead-load", type=float, default=2.0, help="Dead load, ton (default: 2.0)")
    parser.add_argument("--holding-load", type=float, default=8.0, help="Holding load, ton (default: 8.0)")
    parser.add_argument("--rpm", type=float, default=1500.0, help="Motor speed, rpm (default: 1500)")
    parser.add_argument("--pump-eff", type=float, default=0.9, help="Pump efficiency, 0..1 (default: 0.9)")
    parser.add_argument("--loss", type=float, default=5.0, help="System pressure loss, bar (default: 5.0)")

    parser.add_argument("--target-cycle-time", type=float, default=None, help="Cycle time goal, %% change")
    parser.add_argument("--target-pressure", type=float, default=None, help="Max pressure goal, %% change")
    parser.add_argument("--target-efficiency", type=float, default=None, help="Efficiency goal, %% change")

    parser.add_argument("--coefficients-url", type=str, default=None, help="Remote regression coefficients (JSON)")
    parser.add_argument("--artifact", type=str, default=None, help="Local sklearn-style model artifact (JSON)")
    parser.add_argument("--timeout", type=float, default=6.0, help="Remote fetch timeout, s (default: 6)")

    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        inp = InputModel(
            bore_cm=args.bore,
            rod_cm=args.rod,
            dead_load_ton=args.dead_load,
            holding_load_ton=args.holding_load,
            motor_rpm=args.rpm,
            pump_efficiency=args.pump_eff,
            system_loss_bar=args.loss,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    cfg = PressConfig(
        source=ModelSourceConfig(
            url=args.coefficients_url,
            artifact_path=args.artifact,
            timeout_s=args.timeout,
        )
    )
    goal = Goal(
        target_cycle_time_pct=args.target_cycle_time,
        target_max_pressure_pct=args.target_pressure,
        target_efficiency_pct=args.target_efficiency,
    )

    result = run_simulation(inp, cfg.cycle)
    summary = summarize_cycle(inp, result, cfg.cycle)

    print(f"\n{'='*70}")
    print(f"Hydraulic Press Simulator - Duty Cycle")
    print(f"{'='*70}")
    for key, value in summary.as_dict().items():
        print(f"  {key:<28} {value:>10.2f}")

    print(f"\nEnergy per phase:")
    for pe in aggregate_energy_by_phase(result.data):
        print(f"  {pe.phase:<10} {pe.energy_kj:>9.2f} kJ  {pe.duration_s:>6.2f} s  avg {pe.avg_power_kw:>6.2f} kW")

    print(f"\nCalculation steps:")
    for step in result.steps:
        print(f"  {step.formula}: {step.calculation} = {step.result}")

    model = PerformanceModel(CoefficientCache(cfg.source), cfg.confidence)
    prediction = model.predict(inp)

    print(f"\nPrediction ({prediction.source}, confidence {prediction.confidence}, status {prediction.status}):")
    print(f"  max pressure  {prediction.max_pressure_bar:>9.2f} bar")
    print(f"  efficiency    {prediction.efficiency * 100:>9.1f} %")
    print(f"  cycle time    {prediction.cycle_time_s:>9.2f} s")

    suggestions = SensitivityAdvisor(model, cfg.advisor).suggest_improvements(inp, goal)
    if suggestions:
        print(f"\nSuggestions:")
        for s in suggestions:
            flag = " [out of range]" if s.out_of_range else ""
            print(f"  {s.parameter}: {s.current_value:g} -> {s.suggested_value:g} ({s.confidence}){flag}")
            print(f"    {s.impact}")
            print(f"    {s.reasoning}")
    print(f"{'='*70}\n")


if __name__ == "__main__":
    main()
