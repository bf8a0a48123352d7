from amaranth import Elaboratable, Module, Signal

from .config import SAMPLE_WIDTH
from .complex_arith import ComplexMultiplier, ComplexAddSub
from .types.complex import complex_multiply, complex_add_sub


def butterfly(a, b, w):
    """Radix-2 DIT butterfly, returns (a + b*w, a - b*w)"""
    t = complex_multiply(b, w)
    return complex_add_sub(a, t, subtract=False), complex_add_sub(a, t, subtract=True)


class Butterfly(Elaboratable):
    def __init__(self):
        self.a = Signal(SAMPLE_WIDTH)
        self.b = Signal(SAMPLE_WIDTH)
        self.w = Signal(SAMPLE_WIDTH)
        self.x = Signal(SAMPLE_WIDTH)
        self.y = Signal(SAMPLE_WIDTH)

    def elaborate(self, platform):
        m = Module()

        m.submodules.mul = mul = ComplexMultiplier()
        m.submodules.add = add = ComplexAddSub()
        m.submodules.sub = sub = ComplexAddSub()

        m.d.comb += [
            mul.a        .eq(self.b),
            mul.b        .eq(self.w),
            add.a        .eq(self.a),
            add.b        .eq(mul.result),
            add.subtract .eq(0),
            sub.a        .eq(self.a),
            sub.b        .eq(mul.result),
            sub.subtract .eq(1),
            self.x       .eq(add.result),
            self.y       .eq(sub.result),
        ]

        return m
