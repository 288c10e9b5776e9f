#!/usr/bin/env python3
"""
Dot Product Demo.

This example streams one weight/bias/activation run through the MAC chain and
prints what the chain does on every cycle. It shows:

1. Problem Setup
   - Choose a lane count, operand width and overflow rule
   - Lay the run out as a per-cycle data_in stream

2. Execution
   - Cycle-accurate behavioral model (always)
   - Amaranth RTL simulation (with --simulate)

3. Verification
   - Compare DRAIN outputs against the NumPy reference

Usage:
    python 01_dot_product.py [--lanes N] [--saturating] [--full-drain] [--simulate]
"""

import argparse
import sys
from pathlib import Path

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from macchain.config import DrainMode, MacChainConfig  # noqa: E402
from macchain.reference import expected_drain_outputs, expected_results  # noqa: E402
from macchain.sim.engine import MacChainModel  # noqa: E402
from macchain.stream import build_run_stream  # noqa: E402

# =============================================================================
# RTL Simulation
# =============================================================================


def simulate_rtl(config: MacChainConfig, stream: list[int]) -> list[int]:
    """Run the stream through MacChainTop and return the DRAIN outputs."""
    from amaranth.sim import Simulator

    from macchain.top import MacChainTop

    dut = MacChainTop(config)
    results = []

    async def testbench(ctx):
        for value in stream:
            ctx.set(dut.data_in, value)
            if ctx.get(dut.valid):
                results.append(ctx.get(dut.data_out))
            await ctx.tick()

    sim = Simulator(dut)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    sim.run()
    return results


# =============================================================================
# Trace Printing
# =============================================================================


def print_trace(model: MacChainModel) -> None:
    print(f"{'cyc':>4} {'phase':<13} {'k':>2} {'in':>5} {'out':>7}")
    print("-" * 36)
    for rec in model.trace:
        marker = " <-" if rec.valid else ""
        print(
            f"{rec.cycle:>4} {rec.phase.name:<13} {rec.cycle_in_phase:>2} "
            f"{rec.data_in:>5} {rec.data_out:>7}{marker}"
        )


def main():
    parser = argparse.ArgumentParser(description="Weight-stationary MAC chain demo")
    parser.add_argument("--lanes", type=int, default=4, help="Number of lanes (default: 4)")
    parser.add_argument("--data-bits", type=int, default=8, help="Operand width (default: 8)")
    parser.add_argument("--saturating", action="store_true", help="Saturating accumulators")
    parser.add_argument("--full-drain", action="store_true", help="Drain every lane")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for operands")
    parser.add_argument("--simulate", action="store_true", help="Also run the Amaranth RTL")
    args = parser.parse_args()

    acc_bits = args.data_bits + 4 if args.saturating else 2 * args.data_bits
    config = MacChainConfig(
        num_lanes=args.lanes,
        data_bits=args.data_bits,
        acc_bits=acc_bits,
        saturating=args.saturating,
        drain_mode=DrainMode.FULL if args.full_drain else DrainMode.SINGLE,
    )

    # =========================================================================
    # Problem Setup
    # =========================================================================
    rng = np.random.default_rng(args.seed)
    lo, hi = config.data_min, config.data_max + 1
    weights = rng.integers(lo, hi, size=config.num_lanes).tolist()
    biases = rng.integers(lo, hi, size=config.num_lanes).tolist()
    activations = rng.integers(lo, hi, size=config.num_lanes).tolist()

    print("=" * 60)
    print(f"MAC chain: {config.num_lanes} lanes, W={config.data_bits}, A={config.acc_bits}, "
          f"{'saturating' if config.saturating else 'wrapping'}, "
          f"{config.drain_mode.name} drain")
    print("=" * 60)
    print(f"weights:     {weights}")
    print(f"biases:      {biases}")
    print(f"activations: {activations}")
    print()

    stream = build_run_stream(config, weights, biases, activations)

    # =========================================================================
    # Execution (behavioral model)
    # =========================================================================
    model = MacChainModel(config, record=True)
    outputs = model.run(stream)
    print_trace(model)
    print()

    # =========================================================================
    # Verification
    # =========================================================================
    intended = expected_results(config, weights, biases, activations)
    exposed = expected_drain_outputs(config, weights, biases, activations)

    print(f"per-lane results (intended): {intended}")
    print(f"lane accumulators (model):   {model.chain.accumulators}")
    print(f"DRAIN outputs:               {outputs}")

    ok = outputs == exposed and model.chain.accumulators == intended

    if args.simulate:
        rtl_outputs = simulate_rtl(config, stream)
        print(f"DRAIN outputs (RTL):         {rtl_outputs}")
        ok = ok and rtl_outputs == outputs

    print()
    print("PASS" if ok else "FAIL")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
