"""
Lane - The processing element of the weight-stationary MAC chain.

Each lane holds one stationary weight and one running accumulator and
performs at most one signed multiply-accumulate per clock:

    acc <= acc + (in_data * weight)

Registers:
- weight: loaded from in_load while in_weight_load is high, then held
- acc: overwritten with the sign-extended in_load while in_bias_load is high,
  or updated with the MAC result while in_accumulate is high
- relay (out_data): copy of in_data, registered every non-clear cycle. This
  one-cycle delay is what skews the activation stream down the chain.

If in_bias_load and in_accumulate are both high, the accumulate result wins.
in_clear zeroes weight and acc; the relay holds its value during clear.
"""

from amaranth import Module, Signal, signed
from amaranth.lib.wiring import Component, In, Out

from ..config import MacChainConfig


class Lane(Component):
    """
    Lane - performs weight-stationary MAC operations in the chain.

    Ports:
        in_data: Activation input (from the previous lane's relay)
        in_load: Weight/bias load value (external data of this cycle)
        in_weight_load: Latch in_load into the weight register
        in_bias_load: Overwrite the accumulator with in_load
        in_accumulate: Add in_data * weight into the accumulator
        in_clear: Synchronous clear of weight and accumulator

        out_data: Registered copy of in_data (to the next lane)
        out_acc: Current accumulator value
        out_weight: Current weight value

    Parameters:
        config: MacChainConfig with bit widths and overflow behavior
    """

    def __init__(self, config: MacChainConfig):
        self.config = config

        data_width = config.data_bits
        acc_width = config.acc_bits

        super().__init__(
            {
                # Inputs
                "in_data": In(signed(data_width)),
                "in_load": In(signed(data_width)),
                "in_weight_load": In(1),
                "in_bias_load": In(1),
                "in_accumulate": In(1),
                "in_clear": In(1),
                # Outputs
                "out_data": Out(signed(data_width)),
                "out_acc": Out(signed(acc_width)),
                "out_weight": Out(signed(data_width)),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        weight = Signal(signed(cfg.data_bits), name="weight")
        acc = Signal(signed(cfg.acc_bits), name="acc")

        # =================================================================
        # Multiply-Accumulate Computation
        # =================================================================

        # Full-precision product, then a sum one bit wider than either
        # addend so overflow is visible before it is wrapped or clamped.
        product = Signal(signed(cfg.product_bits), name="product")
        m.d.comb += product.eq(self.in_data * weight)

        total = Signal(signed(cfg.sum_bits), name="total")
        m.d.comb += total.eq(acc + product)

        # =================================================================
        # Register Update Logic
        # =================================================================

        with m.If(self.in_clear):
            m.d.sync += [
                weight.eq(0),
                acc.eq(0),
            ]
        with m.Else():
            m.d.sync += self.out_data.eq(self.in_data)

            with m.If(self.in_weight_load):
                m.d.sync += weight.eq(self.in_load)

            with m.If(self.in_bias_load):
                m.d.sync += acc.eq(self.in_load)  # sign-extends

            # Evaluated after the bias load so it takes priority
            with m.If(self.in_accumulate):
                if cfg.saturating:
                    with m.If(total > cfg.acc_max):
                        m.d.sync += acc.eq(cfg.acc_max)
                    with m.Elif(total < cfg.acc_min):
                        m.d.sync += acc.eq(cfg.acc_min)
                    with m.Else():
                        m.d.sync += acc.eq(total)
                else:
                    # Truncation to acc_bits is two's-complement wraparound
                    m.d.sync += acc.eq(total)

        m.d.comb += [
            self.out_acc.eq(acc),
            self.out_weight.eq(weight),
        ]

        return m
