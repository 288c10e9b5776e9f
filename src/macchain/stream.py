"""
Host-side run stream construction.

The chain has no handshake: the driver must present weights, biases and
activations on exactly the cycles the sequencer expects them. These helpers
lay one run out as a flat list of data_in values, one per clock, starting at
the IDLE cycle.
"""

from .config import MacChainConfig


def _check_range(name: str, values: list[int], config: MacChainConfig) -> None:
    for i, value in enumerate(values):
        if not config.data_min <= value <= config.data_max:
            raise ValueError(
                f"{name}[{i}] = {value} does not fit in a signed {config.data_bits}-bit operand"
            )


def build_run_stream(
    config: MacChainConfig,
    weights: list[int],
    biases: list[int],
    activations: list[int],
) -> list[int]:
    """
    Build the data_in sequence for one run.

    Layout: 1 IDLE cycle, N weights, N biases, 2N-1 activation cycles (zero
    padded), then the DRAIN cycles (zeros).

    Raises:
        ValueError: if weights/biases are not N long, activations exceed the
            compute window, or any value is out of the signed operand range.
    """
    n = config.num_lanes
    weights = list(weights)
    biases = list(biases)
    activations = list(activations)

    if len(weights) != n:
        raise ValueError(f"expected {n} weights, got {len(weights)}")
    if len(biases) != n:
        raise ValueError(f"expected {n} biases, got {len(biases)}")
    if len(activations) > config.compute_cycles:
        raise ValueError(
            f"at most {config.compute_cycles} activations fit in the compute window, "
            f"got {len(activations)}"
        )

    _check_range("weights", weights, config)
    _check_range("biases", biases, config)
    _check_range("activations", activations, config)

    padding = [0] * (config.compute_cycles - len(activations))
    return [0] + weights + biases + activations + padding + [0] * config.drain_cycles


def drain_window(config: MacChainConfig) -> range:
    """Offsets within a run stream at which data_out holds a result."""
    return range(config.run_cycles - config.drain_cycles, config.run_cycles)
