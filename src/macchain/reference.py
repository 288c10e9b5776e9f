"""
NumPy reference for the per-lane results of one run.

Lane i's accumulate window covers compute cycles i .. i+N-1 and its input is
the activation stream delayed by i cycles, so every lane sees activations
0 .. N-1 in order:

    acc[i] = bias[i] + sum_{k < N} activation[k] * weight[i]

Activations presented after the first N compute cycles never fall inside a
window. Because saturation is applied after each product, the sum is
accumulated step by step rather than as one dot product.
"""

import numpy as np

from .config import DrainMode, MacChainConfig


def _fit(acc: np.ndarray, config: MacChainConfig) -> np.ndarray:
    if config.saturating:
        return np.clip(acc, config.acc_min, config.acc_max)
    span = 1 << config.acc_bits
    return (acc - config.acc_min) % span + config.acc_min


def expected_results(
    config: MacChainConfig,
    weights: list[int],
    biases: list[int],
    activations: list[int],
) -> list[int]:
    """Intended accumulator of every lane at the start of DRAIN."""
    n = config.num_lanes
    w = np.asarray(weights, dtype=np.int64)
    acc = np.asarray(biases, dtype=np.int64)

    x = np.zeros(n, dtype=np.int64)
    seen = np.asarray(activations[:n], dtype=np.int64)
    x[: len(seen)] = seen

    for k in range(n):
        acc = _fit(acc + w * x[k], config)

    return [int(v) for v in acc]


def expected_drain_outputs(
    config: MacChainConfig,
    weights: list[int],
    biases: list[int],
    activations: list[int],
) -> list[int]:
    """
    Values data_out shows during DRAIN, in order.

    DrainMode.SINGLE exposes lane 0 only; DrainMode.FULL exposes all lanes.
    """
    results = expected_results(config, weights, biases, activations)
    if config.drain_mode is DrainMode.FULL:
        return results
    return results[:1]
