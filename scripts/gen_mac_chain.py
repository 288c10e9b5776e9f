#!/usr/bin/env python3
"""Generate MAC chain Verilog from macchain."""

import argparse
import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from macchain.config import DrainMode, MacChainConfig  # noqa: E402
from macchain.top import MacChainTop  # noqa: E402


def parse_args():
    parser = argparse.ArgumentParser(description="Generate MAC chain Verilog")
    parser.add_argument("--lanes", type=int, default=4, help="Number of lanes (default: 4)")
    parser.add_argument("--data-bits", type=int, default=8, help="Operand width (default: 8)")
    parser.add_argument(
        "--acc-bits",
        type=int,
        default=None,
        help="Accumulator width (default: 2*data-bits, or data-bits+4 with --saturating)",
    )
    parser.add_argument("--saturating", action="store_true", help="Clamp instead of wrap")
    parser.add_argument(
        "--full-drain",
        action="store_true",
        help="Hold DRAIN for one cycle per lane instead of a single cycle",
    )
    parser.add_argument("--name", default="mac_chain_top", help="Verilog module name")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file (default: gen/<name>.v)",
    )
    return parser.parse_args()


def main():
    args = parse_args()

    acc_bits = args.acc_bits
    if acc_bits is None:
        acc_bits = args.data_bits + 4 if args.saturating else 2 * args.data_bits

    config = MacChainConfig(
        num_lanes=args.lanes,
        data_bits=args.data_bits,
        acc_bits=acc_bits,
        saturating=args.saturating,
        drain_mode=DrainMode.FULL if args.full_drain else DrainMode.SINGLE,
    )
    top = MacChainTop(config)

    output_path = args.output
    if output_path is None:
        gen_dir = project_root / "gen"
        gen_dir.mkdir(exist_ok=True)
        output_path = gen_dir / f"{args.name}.v"

    with open(output_path, "w") as f:
        f.write(verilog.convert(top, name=args.name))

    print(
        f"Generated {output_path} "
        f"(lanes={config.num_lanes}, data_bits={config.data_bits}, acc_bits={config.acc_bits}, "
        f"saturating={config.saturating}, drain={config.drain_mode.name})"
    )


if __name__ == "__main__":
    main()
