"""
Cycle-accurate behavioral model of the full MAC chain.

LaneChainModel wires N LaneModels the way macchain.core.lane_chain wires the
RTL lanes, and MacChainModel adds the sequencer to give the single-value
boundary of MacChainTop:

    data_out = model.tick(reset, data_in)

Each call is one clock period. data_out is computed from the state before the
edge (it is what MacChainTop.data_out shows during that cycle), then every
register advances together.

Usage:
    model = MacChainModel(SMALL_SAT_CONFIG)
    for value in build_run_stream(config, weights, biases, activations):
        out = model.tick(False, value)
"""

from dataclasses import dataclass

from ..arith import sign_extend
from ..config import MacChainConfig, Phase
from .lane import LaneModel
from .sequencer import Controls, SequencerModel


@dataclass
class TickRecord:
    """Observable state of one cycle, captured before the clock edge."""

    cycle: int
    phase: Phase
    cycle_in_phase: int
    data_in: int
    data_out: int
    read_index: int
    valid: bool
    reset: bool


class LaneChainModel:
    """
    N lanes in a systolic chain with a read-out mux.

    Lane i's input is lane i-1's relay as it was before this edge; all lanes
    then update together.
    """

    def __init__(self, config: MacChainConfig):
        self.config = config
        self.lanes = [LaneModel(config) for _ in range(config.num_lanes)]

    def read(self, read_index: int) -> int:
        """Accumulator of the selected lane, 0 for an out-of-range index."""
        if 0 <= read_index < len(self.lanes):
            return self.lanes[read_index].accumulator
        return 0

    def clear(self) -> None:
        for lane in self.lanes:
            lane.clear()

    def step(self, external_input: int, controls: Controls) -> int:
        """
        Advance every lane by one edge.

        Returns the read-out value seen during this cycle (pre-edge).
        """
        output = self.read(controls.read_index)

        # Snapshot upstream relays before any lane is updated
        inputs = [external_input] + [lane.relay for lane in self.lanes[:-1]]

        for i, lane in enumerate(self.lanes):
            lane.step(
                inputs[i],
                external_input,
                weight_load=controls.weight_load[i],
                bias_load=controls.bias_load[i],
                accumulate_en=controls.accumulate[i],
            )

        return output

    @property
    def weights(self) -> list[int]:
        return [lane.weight for lane in self.lanes]

    @property
    def accumulators(self) -> list[int]:
        return [lane.accumulator for lane in self.lanes]

    @property
    def relays(self) -> list[int]:
        return [lane.relay for lane in self.lanes]


class MacChainModel:
    """
    Sequencer plus lane chain behind the tick(reset, data_in) boundary.

    The model is a single long-lived object. After a run returns to IDLE it
    accepts the next weight/bias/activation sequence with no reset. tick()
    must be called exactly once per clock period and is not re-entrant.

    Attributes:
        config: Hardware configuration
        sequencer: SequencerModel
        chain: LaneChainModel
        cycle: Number of ticks evaluated so far
        trace: TickRecords, when constructed with record=True
    """

    def __init__(self, config: MacChainConfig, record: bool = False):
        self.config = config
        self.sequencer = SequencerModel(config)
        self.chain = LaneChainModel(config)
        self.cycle = 0
        self.record = record
        self.trace: list[TickRecord] = []

    @property
    def phase(self) -> Phase:
        return self.sequencer.phase

    def tick(self, reset: bool, data_in: int) -> int:
        """
        Evaluate one clock period.

        Args:
            reset: Synchronous reset; overrides every enable on this edge
            data_in: External data (wrapped to data_bits like a port would)

        Returns:
            The selected lane's accumulator during this cycle. Meaningful only
            while the sequencer is in DRAIN.
        """
        data_in = sign_extend(data_in, self.config.data_bits)
        controls = self.sequencer.controls()

        if reset:
            data_out = self.chain.read(controls.read_index)
            self.chain.clear()
        else:
            data_out = self.chain.step(data_in, controls)

        if self.record:
            self.trace.append(
                TickRecord(
                    cycle=self.cycle,
                    phase=self.sequencer.phase,
                    cycle_in_phase=self.sequencer.cycle,
                    data_in=data_in,
                    data_out=data_out,
                    read_index=controls.read_index,
                    valid=controls.valid,
                    reset=reset,
                )
            )

        self.sequencer.advance(reset)
        self.cycle += 1
        return data_out

    def run(self, stream: list[int]) -> list[int]:
        """Tick once per stream value (reset low); return the valid outputs."""
        results = []
        for value in stream:
            valid = self.sequencer.controls().valid
            out = self.tick(False, value)
            if valid:
                results.append(out)
        return results
