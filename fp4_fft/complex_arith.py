from amaranth import Elaboratable, Module, Signal, Cat

from .config import SAMPLE_WIDTH
from .fp4_arith import FP4Multiplier, FP4AddSub


def _real(word):
    return word[4:8]

def _imag(word):
    return word[0:4]


class ComplexMultiplier(Elaboratable):
    '''
    (ar + j ai) * (br + j bi) with four FP4 multipliers and two adders
    '''
    def __init__(self):
        self.a      = Signal(SAMPLE_WIDTH)
        self.b      = Signal(SAMPLE_WIDTH)
        self.result = Signal(SAMPLE_WIDTH)

    def elaborate(self, platform):
        m = Module()

        m.submodules.rr = rr = FP4Multiplier()
        m.submodules.ii = ii = FP4Multiplier()
        m.submodules.ri = ri = FP4Multiplier()
        m.submodules.ir = ir = FP4Multiplier()
        m.submodules.re = re = FP4AddSub()
        m.submodules.im = im = FP4AddSub()

        a, b = self.a, self.b
        m.d.comb += [
            rr.a        .eq(_real(a)),
            rr.b        .eq(_real(b)),
            ii.a        .eq(_imag(a)),
            ii.b        .eq(_imag(b)),
            ri.a        .eq(_real(a)),
            ri.b        .eq(_imag(b)),
            ir.a        .eq(_imag(a)),
            ir.b        .eq(_real(b)),
            # real = ar*br - ai*bi
            re.a        .eq(rr.result),
            re.b        .eq(ii.result),
            re.subtract .eq(1),
            # imag = ar*bi + ai*br
            im.a        .eq(ri.result),
            im.b        .eq(ir.result),
            im.subtract .eq(0),
            self.result .eq(Cat(im.result, re.result)),
        ]

        return m


class ComplexAddSub(Elaboratable):
    def __init__(self):
        self.a        = Signal(SAMPLE_WIDTH)
        self.b        = Signal(SAMPLE_WIDTH)
        self.subtract = Signal()
        self.result   = Signal(SAMPLE_WIDTH)

    def elaborate(self, platform):
        m = Module()

        m.submodules.re = re = FP4AddSub()
        m.submodules.im = im = FP4AddSub()

        for unit, part in ((re, _real), (im, _imag)):
            m.d.comb += [
                unit.a        .eq(part(self.a)),
                unit.b        .eq(part(self.b)),
                unit.subtract .eq(self.subtract),
            ]
        m.d.comb += self.result.eq(Cat(im.result, re.result))

        return m
