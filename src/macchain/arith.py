"""
Fixed-width signed arithmetic helpers.

Python integers never overflow, so every register of the behavioral model is
kept in range explicitly through these helpers. They match what the RTL does
with Amaranth signed signals:

- wrap: truncate to N bits, reinterpret as two's complement
- saturate: clamp to the signed N-bit range
- sign_extend: reinterpret the low N bits of a raw bus value as signed
"""


def signed_range(bits: int) -> tuple[int, int]:
    """Return (min, max) of a signed two's-complement value of `bits` width."""
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def wrap(value: int, bits: int) -> int:
    """Truncate `value` to `bits` and interpret the result as signed."""
    mask = (1 << bits) - 1
    value &= mask
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value


def saturate(value: int, bits: int) -> int:
    """Clamp `value` to the signed range of `bits`."""
    lo, hi = signed_range(bits)
    if value > hi:
        return hi
    if value < lo:
        return lo
    return value


def sign_extend(raw: int, bits: int) -> int:
    """Interpret the low `bits` of an unsigned bus value as signed."""
    return wrap(raw, bits)


def to_unsigned(value: int, bits: int) -> int:
    """Two's-complement bit pattern of a signed value, as seen on a bus."""
    return value & ((1 << bits) - 1)


def accumulate(acc: int, product: int, bits: int, saturating: bool) -> int:
    """
    Add a product into an accumulator of `bits` width.

    The sum is formed at full precision, then either clamped (saturating) or
    wrapped modulo 2**bits. Wraparound is the defined behavior of the
    non-saturating configuration, not an error.
    """
    total = acc + product
    if saturating:
        return saturate(total, bits)
    return wrap(total, bits)
