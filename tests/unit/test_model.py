"""
Unit tests for the cycle-accurate behavioral model.

These tests verify the timing and numeric contract without RTL simulation:
1. Skew: relay timing independent of phase
2. Load ordering for weights and biases
3. Reference scenarios, intended and as-specified
4. Determinism and reset behavior
5. Trace recording
"""

import random

import pytest

from macchain.config import (
    SMALL_SAT_CONFIG,
    DrainMode,
    MacChainConfig,
    Phase,
)
from macchain.reference import expected_drain_outputs, expected_results
from macchain.sim.engine import LaneChainModel, MacChainModel
from macchain.sim.sequencer import Controls
from macchain.stream import build_run_stream


def _idle_controls(n, **overrides):
    ctrl = Controls(weight_load=[False] * n, bias_load=[False] * n, accumulate=[False] * n)
    for key, value in overrides.items():
        setattr(ctrl, key, value)
    return ctrl


class TestSkew:
    """Activations move one lane per cycle regardless of phase."""

    @pytest.mark.parametrize("num_lanes", [1, 4, 8])
    def test_relay_skew_without_enables(self, num_lanes):
        config = MacChainConfig(num_lanes=num_lanes)
        chain = LaneChainModel(config)
        idle = _idle_controls(num_lanes)

        chain.step(42, idle)
        for i in range(num_lanes):
            assert chain.relays[i] == 42
            assert all(r == 0 for j, r in enumerate(chain.relays) if j != i)
            chain.step(0, idle)

    def test_relay_updates_in_every_phase(self):
        """The engine's lane 0 relay always holds the previous cycle's data_in."""
        config = MacChainConfig(num_lanes=4)
        model = MacChainModel(config)
        rng = random.Random(7)

        for _ in range(2 * config.run_cycles):
            value = rng.randint(config.data_min, config.data_max)
            model.tick(False, value)
            assert model.chain.relays[0] == value

    def test_activation_reaches_lane_i_at_t_plus_i(self):
        """A single nonzero activation at compute cycle t only lands on lane i at t+i."""
        config = MacChainConfig(num_lanes=4, drain_mode=DrainMode.FULL)
        # Spike at compute cycle 2: lane i multiplies it at cycle 2+i, in window for all
        activations = [0, 0, 1, 0, 0, 0, 0]
        stream = build_run_stream(config, [1, 10, 100, -100], [0] * 4, activations)

        assert MacChainModel(config).run(stream) == [1, 10, 100, -100]

    def test_late_activation_misses_windows(self):
        """Activations after the first N compute cycles never reach a window."""
        config = MacChainConfig(num_lanes=4, drain_mode=DrainMode.FULL)
        activations = [0, 0, 0, 0, 5, 5, 5]
        stream = build_run_stream(config, [1, 2, 3, 4], [0] * 4, activations)

        assert MacChainModel(config).run(stream) == [0, 0, 0, 0]


class TestLoadOrdering:
    """After N load cycles lane i holds the i-th value presented."""

    @pytest.mark.parametrize("num_lanes", [1, 2, 4, 8])
    def test_weights_and_biases(self, num_lanes):
        config = MacChainConfig(num_lanes=num_lanes)
        model = MacChainModel(config)
        weights = [(-1) ** i * (i + 1) for i in range(num_lanes)]
        biases = [10 * i - 40 for i in range(num_lanes)]

        model.tick(False, 0)  # IDLE
        for w in weights:
            assert model.phase is Phase.LOAD_WEIGHTS
            model.tick(False, w)
        assert model.chain.weights == weights

        for b in biases:
            assert model.phase is Phase.LOAD_BIASES
            model.tick(False, b)
        assert model.chain.accumulators == biases
        assert model.phase is Phase.COMPUTE


class TestScenarios:
    """Reference workloads, both the intended per-lane results and the
    values the literal single-cycle DRAIN exposes."""

    WEIGHTS = [2, 3, 4, 5]
    BIASES = [0, 0, 0, 0]

    def test_saturating_intended_results(self):
        """Intended per-lane results: 56, 84, 112 and 140 saturated to 127."""
        activations = [7, 7, 7, 7, 0, 0, 0]
        config = MacChainConfig(
            num_lanes=4, data_bits=4, acc_bits=8, saturating=True, drain_mode=DrainMode.FULL
        )
        stream = build_run_stream(config, self.WEIGHTS, self.BIASES, activations)

        assert MacChainModel(config).run(stream) == [56, 84, 112, 127]
        assert expected_results(config, self.WEIGHTS, self.BIASES, activations) == [
            56,
            84,
            112,
            127,
        ]

    def test_saturating_as_specified_output(self):
        """As specified (single-cycle DRAIN) only lane 0's 56 is exposed."""
        activations = [7, 7, 7, 7, 0, 0, 0]
        config = SMALL_SAT_CONFIG
        model = MacChainModel(config, record=True)
        stream = build_run_stream(config, self.WEIGHTS, self.BIASES, activations)

        assert model.run(stream) == [56]
        drain = [r for r in model.trace if r.phase is Phase.DRAIN]
        assert len(drain) == 1
        assert drain[0].read_index == 0
        assert model.phase is Phase.IDLE

        # The other lanes hold their intended results, unread
        assert model.chain.accumulators == [56, 84, 112, 127]

    def test_wrapping_scenario(self):
        """W=8, A=16: with the sliding window every lane sums all four activations.

        Per-lane prefix sums (20, 90, 240, 500) would need lane i to stop after
        activation i; under this schedule lane i sees activations 0..3.
        """
        activations = [10, 20, 30, 40, 0, 0, 0]
        config = MacChainConfig(num_lanes=4, data_bits=8, acc_bits=16, drain_mode=DrainMode.FULL)
        stream = build_run_stream(config, self.WEIGHTS, self.BIASES, activations)

        assert MacChainModel(config).run(stream) == [200, 300, 400, 500]

    def test_wrapping_as_specified_output(self):
        activations = [10, 20, 30, 40, 0, 0, 0]
        config = MacChainConfig(num_lanes=4, data_bits=8, acc_bits=16)
        stream = build_run_stream(config, self.WEIGHTS, self.BIASES, activations)

        assert MacChainModel(config).run(stream) == [200]
        assert expected_drain_outputs(config, self.WEIGHTS, self.BIASES, activations) == [200]


class TestDeterminismAndReset:
    """Identical inputs give identical outputs; reset erases history."""

    def test_determinism(self):
        config = MacChainConfig(num_lanes=4, data_bits=4, acc_bits=8, saturating=True)
        rng = random.Random(1234)
        stream = [rng.randint(-8, 7) for _ in range(5 * config.run_cycles)]
        resets = {3, 40, 41}

        def outputs():
            model = MacChainModel(config)
            return [model.tick(i in resets, v) for i, v in enumerate(stream)]

        assert outputs() == outputs()

    def test_reset_mid_compute(self):
        """Reset in COMPUTE zeroes weights/accumulators and returns to IDLE."""
        config = MacChainConfig(num_lanes=4, data_bits=8, acc_bits=16, drain_mode=DrainMode.FULL)
        model = MacChainModel(config)

        stale = build_run_stream(config, [9, 9, 9, 9], [99, 99, 99, 99], [9] * 7)
        for value in stale[:12]:
            model.tick(False, value)
        assert model.phase is Phase.COMPUTE

        model.tick(True, 9)
        assert model.phase is Phase.IDLE
        assert model.sequencer.cycle == 0
        assert model.chain.weights == [0, 0, 0, 0]
        assert model.chain.accumulators == [0, 0, 0, 0]

        fresh = build_run_stream(config, [1, 2, 3, 4], [0, 0, 0, 0], [1, 2, 3, 4])
        assert model.run(fresh) == [10, 20, 30, 40]

    def test_reset_holds_relay(self):
        config = MacChainConfig(num_lanes=2)
        model = MacChainModel(config)
        model.tick(False, 17)
        model.tick(True, -3)
        assert model.chain.relays[0] == 17

    def test_data_in_wraps_to_port_width(self):
        """An out-of-range data_in is truncated like a data_bits-wide port."""
        config = MacChainConfig(num_lanes=2, data_bits=4, acc_bits=8)
        model = MacChainModel(config)
        model.tick(False, 0)
        model.tick(False, 0x1F)  # low 4 bits 0xF -> -1
        assert model.chain.weights[0] == -1


class TestTrace:
    def test_trace_records_every_cycle(self):
        config = MacChainConfig(num_lanes=4)
        model = MacChainModel(config, record=True)
        stream = build_run_stream(config, [1, 2, 3, 4], [0] * 4, [1] * 4)
        model.run(stream)

        assert [r.cycle for r in model.trace] == list(range(config.run_cycles))
        assert model.trace[0].phase is Phase.IDLE
        assert model.trace[-1].phase is Phase.DRAIN
        assert model.trace[-1].valid
        assert not any(r.valid for r in model.trace[:-1])

    def test_no_trace_by_default(self):
        model = MacChainModel(MacChainConfig())
        model.tick(False, 1)
        assert model.trace == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
