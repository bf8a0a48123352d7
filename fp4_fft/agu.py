from collections import namedtuple

from amaranth import Elaboratable, Module, Signal, C

from .config import MAX_LOG2N, log2_size

ButterflyAddress = namedtuple("ButterflyAddress", ["stage", "addr_a", "addr_b", "twiddle_k"])


class AddressSequencer:
    """
    Software address generator for the in-place radix-2 DIT traversal.

    Stage s works with stride 2^s: butterflies (a, a + stride) inside groups of
    2*stride words, twiddle W_N^k with k = butterfly * N / (2*stride).
    """
    def __init__(self, n):
        self.n     = n
        self.log2n = log2_size(n)
        self.restart()

    def restart(self):
        self.stage     = 0
        self.group     = 0
        self.butterfly = 0
        self.stride    = 1
        self.finished  = False

    @property
    def groups(self):
        return self.n // (2 * self.stride)

    @property
    def addr_a(self):
        return self.group * 2 * self.stride + self.butterfly

    @property
    def addr_b(self):
        return self.addr_a + self.stride

    @property
    def twiddle_k(self):
        return self.butterfly * self.groups

    def current(self):
        return ButterflyAddress(self.stage, self.addr_a, self.addr_b, self.twiddle_k)

    def advance(self):
        """Move to the next butterfly, returns (stage_done, fft_done)"""
        if self.finished:
            return False, False
        if self.butterfly < self.stride - 1:
            self.butterfly += 1
            return False, False
        self.butterfly = 0
        if self.group < self.groups - 1:
            self.group += 1
            return False, False
        self.group = 0
        if self.stage == self.log2n - 1:
            self.finished = True
            return True, True
        self.stride <<= 1
        self.stage += 1
        return True, False


def address_sequence(n):
    agu = AddressSequencer(n)
    while not agu.finished:
        yield agu.current()
        agu.advance()


class AddressGenerator(Elaboratable):
    '''
    Butterfly address generator

    Holds its state unless `advance` is asserted. `stage_done` and `fft_done`
    are asserted together with `advance` on the last butterfly of a stage and
    of the transform, respectively. `start` restarts from stage 0.
    '''
    def __init__(self):
        # Configuration
        self.log2n      = Signal(range(MAX_LOG2N + 1))
        # Control
        self.start      = Signal()
        self.advance    = Signal()
        # Outputs
        self.stage      = Signal(range(MAX_LOG2N))
        self.addr_a     = Signal(MAX_LOG2N)
        self.addr_b     = Signal(MAX_LOG2N)
        self.twiddle_k  = Signal(MAX_LOG2N - 1)
        self.stage_done = Signal()
        self.fft_done   = Signal()
        self.finished   = Signal()

    def elaborate(self, platform):
        m = Module()

        group     = Signal(MAX_LOG2N - 1)
        bfly      = Signal(MAX_LOG2N - 1)
        stride    = Signal(MAX_LOG2N, init=1)
        groups    = Signal(MAX_LOG2N)

        m.d.comb += [
            groups          .eq((C(1, MAX_LOG2N + 1) << self.log2n) >> (self.stage + 1)),
            self.addr_a     .eq(group * (stride << 1) + bfly),
            self.addr_b     .eq(self.addr_a + stride),
            self.twiddle_k  .eq(bfly * groups),
        ]

        last_bfly  = bfly == stride - 1
        last_group = group == groups - 1
        last_stage = self.stage == self.log2n - 1

        step = Signal()
        m.d.comb += [
            step            .eq(self.advance & ~self.finished),
            self.stage_done .eq(step & last_bfly & last_group),
            self.fft_done   .eq(self.stage_done & last_stage),
        ]

        with m.If(self.start):
            m.d.sync += [
                self.stage    .eq(0),
                group         .eq(0),
                bfly          .eq(0),
                stride        .eq(1),
                self.finished .eq(0),
            ]
        with m.Elif(step):
            with m.If(~last_bfly):
                m.d.sync += bfly.eq(bfly + 1)
            with m.Elif(~last_group):
                m.d.sync += [
                    bfly  .eq(0),
                    group .eq(group + 1),
                ]
            with m.Else():
                m.d.sync += [
                    bfly  .eq(0),
                    group .eq(0),
                ]
                with m.If(last_stage):
                    m.d.sync += self.finished.eq(1)
                with m.Else():
                    m.d.sync += [
                        stride     .eq(stride << 1),
                        self.stage .eq(self.stage + 1),
                    ]

        return m
