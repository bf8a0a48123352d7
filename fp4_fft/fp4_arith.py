from amaranth import Elaboratable, Module, Signal, Cat, C, Mux

from .config import COMPONENT_WIDTH

# Largest magnitude code: exponent 3, mantissa 1
_SATURATED = C(0b111, 3)


class FP4Multiplier(Elaboratable):
    '''
    Combinational FP4 x FP4 multiplier
    Overflow saturates, underflow flushes to +0
    '''
    def __init__(self):
        self.a      = Signal(COMPONENT_WIDTH)
        self.b      = Signal(COMPONENT_WIDTH)
        self.result = Signal(COMPONENT_WIDTH)

    def elaborate(self, platform):
        m = Module()

        a, b = self.a, self.b
        sign = a[3] ^ b[3]
        ea, eb = a[1:3], b[1:3]

        zero = (a[0:3] == 0) | (b[0:3] == 0)

        # {hidden, mantissa} significands, 3x3 fits in 4 bits
        product  = Signal(4)
        shifted  = Signal(4)
        norm     = Signal()
        m.d.comb += [
            product .eq(Cat(a[0], ea.any()) * Cat(b[0], eb.any())),
            norm    .eq(product[3]),
            shifted .eq(Mux(norm, product >> 1, product)),
        ]

        # Exponent biased by +1 so that underflow stays non-negative
        exp_b    = Signal(3)
        mantissa = Signal()
        m.d.comb += exp_b.eq(ea + eb + norm)
        with m.If(exp_b == 1):
            m.d.comb += mantissa.eq(shifted[1])
        with m.Else():
            m.d.comb += mantissa.eq(shifted >= 5)

        with m.If(zero | (exp_b == 0)):
            m.d.comb += self.result.eq(0)
        with m.Elif(exp_b > 4):
            m.d.comb += self.result.eq(Cat(_SATURATED, sign))
        with m.Else():
            m.d.comb += self.result.eq(Cat(mantissa, (exp_b - 1)[0:2], sign))

        return m


class FP4AddSub(Elaboratable):
    '''
    Combinational FP4 adder / subtractor, computes a - b when `subtract` is set
    '''
    def __init__(self):
        self.a        = Signal(COMPONENT_WIDTH)
        self.b        = Signal(COMPONENT_WIDTH)
        self.subtract = Signal()
        self.result   = Signal(COMPONENT_WIDTH)

    def elaborate(self, platform):
        m = Module()

        a, b = self.a, self.b
        sign_a = a[3]
        sign_b = b[3] ^ self.subtract

        # Order operands by magnitude (exponent, then mantissa)
        swap   = Signal()
        l_mag  = Signal(3)
        s_mag  = Signal(3)
        l_sign = Signal()
        s_sign = Signal()
        m.d.comb += [
            swap   .eq(b[0:3] > a[0:3]),
            l_mag  .eq(Mux(swap, b[0:3], a[0:3])),
            s_mag  .eq(Mux(swap, a[0:3], b[0:3])),
            l_sign .eq(Mux(swap, sign_b, sign_a)),
            s_sign .eq(Mux(swap, sign_a, sign_b)),
        ]
        l_exp, s_exp = l_mag[1:3], s_mag[1:3]

        # Subnormals align as if they had exponent 1
        l_eff = Signal(2)
        s_eff = Signal(2)
        diff  = Signal(2)
        m.d.comb += [
            l_eff .eq(Mux(l_exp == 0, 1, l_exp)),
            s_eff .eq(Mux(s_exp == 0, 1, s_exp)),
            diff  .eq(l_eff - s_eff),
        ]

        # {hidden, mantissa, guard} significands
        l_sig     = Cat(C(0, 1), l_mag[0], l_exp.any())
        s_sig     = Cat(C(0, 1), s_mag[0], s_exp.any())
        s_aligned = Signal(3)
        with m.If(diff >= 3):
            m.d.comb += s_aligned.eq(0)
        with m.Else():
            m.d.comb += s_aligned.eq(s_sig >> diff)

        raw = Signal(4)
        with m.If(l_sign != s_sign):
            m.d.comb += raw.eq(l_sig - s_aligned)
        with m.Else():
            m.d.comb += raw.eq(l_sig + s_aligned)

        # Normalize from the leading one, exponent biased by +2
        exp_b    = Signal(3)
        mantissa = Signal()
        with m.If(raw[3]):
            m.d.comb += [ exp_b.eq(l_eff + 3), mantissa.eq(raw[2]) ]
        with m.Elif(raw[2]):
            m.d.comb += [ exp_b.eq(l_eff + 2), mantissa.eq(raw[1]) ]
        with m.Elif(raw[1]):
            m.d.comb += [ exp_b.eq(l_eff + 1), mantissa.eq(raw[0]) ]
        with m.Else():
            m.d.comb += [ exp_b.eq(l_eff),     mantissa.eq(0) ]

        with m.If((raw == 0) | (exp_b < 2)):
            m.d.comb += self.result.eq(0)
        with m.Elif(exp_b == 2):
            # subnormal 0.5
            m.d.comb += self.result.eq(Cat(C(1, 1), C(0, 2), l_sign))
        with m.Elif(exp_b > 5):
            m.d.comb += self.result.eq(Cat(_SATURATED, l_sign))
        with m.Else():
            m.d.comb += self.result.eq(Cat(mantissa, (exp_b - 2)[0:2], l_sign))

        return m
