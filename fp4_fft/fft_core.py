from amaranth import Elaboratable, Module, Signal, ResetInserter

from .config import MAX_N, MAX_LOG2N, SAMPLE_WIDTH
from .agu import AddressGenerator
from .twiddle import TwiddleROM
from .butterfly import Butterfly
from .pingpong import PingPongMemory, reverse_address


def decode_size(m, n):
    """log2(n) for the supported transform sizes, 0 otherwise"""
    log2n = Signal(range(MAX_LOG2N + 1))
    with m.Switch(n):
        for i in range(1, MAX_LOG2N + 1):
            with m.Case(1 << i):
                m.d.comb += log2n.eq(i)
    return log2n


class FFTController(Elaboratable):
    '''
    Sequencer for the in-place radix-2 DIT FFT

    One butterfly at a time: READ_A, READ_B, COMPUTE, WRITE_X, WRITE_Y.
    Operands are read from bank `bank_sel` and results are written to the
    other bank at the same addresses; `bank_sel` toggles once per stage.
    '''
    def __init__(self):
        # Configuration / control
        self.n        = Signal(range(MAX_N + 1))
        self.start    = Signal()
        self.done     = Signal()
        self.error    = Signal()
        self.busy     = Signal()
        self.bank_sel = Signal()
        self.log2n    = Signal(range(MAX_LOG2N + 1))
        # Memory interface
        self.rd_addr  = Signal(range(MAX_N))
        self.rd_data  = Signal(SAMPLE_WIDTH)
        self.wr_addr  = Signal(range(MAX_N))
        self.wr_data  = Signal(SAMPLE_WIDTH)
        self.wr_en    = Signal()

    def elaborate(self, platform):
        m = Module()

        m.submodules.agu       = agu = AddressGenerator()
        m.submodules.twiddle   = twiddle = TwiddleROM()
        m.submodules.butterfly = bfly = Butterfly()

        requested_log2n = decode_size(m, self.n)

        # Operand and result registers of the butterfly in flight
        op_a = Signal(SAMPLE_WIDTH)
        op_b = Signal(SAMPLE_WIDTH)
        x    = Signal(SAMPLE_WIDTH)
        y    = Signal(SAMPLE_WIDTH)

        m.d.comb += [
            agu.log2n     .eq(self.log2n),
            twiddle.k     .eq(agu.twiddle_k),
            twiddle.log2n .eq(self.log2n),
            bfly.a        .eq(op_a),
            bfly.b        .eq(self.rd_data),
            bfly.w        .eq(twiddle.data),
        ]

        with m.FSM(name="fft_ctl") as fsm:
            with m.State("IDLE"):
                with m.If(self.start):
                    with m.If((requested_log2n == 0) | self.error):
                        m.d.sync += self.error.eq(1)
                    with m.Else():
                        m.d.sync += [
                            self.log2n    .eq(requested_log2n),
                            self.bank_sel .eq(0),
                        ]
                        m.d.comb += agu.start.eq(1)
                        m.next = "INIT"

            with m.State("INIT"):
                m.next = "READ_A"

            with m.State("READ_A"):
                m.d.comb += self.rd_addr.eq(agu.addr_a)
                m.next = "READ_B"

            with m.State("READ_B"):
                m.d.comb += self.rd_addr.eq(agu.addr_b)
                m.d.sync += op_a.eq(self.rd_data)
                m.next = "COMPUTE"

            with m.State("COMPUTE"):
                m.d.sync += [
                    op_b .eq(self.rd_data),
                    x    .eq(bfly.x),
                    y    .eq(bfly.y),
                ]
                m.next = "WRITE_X"

            with m.State("WRITE_X"):
                m.d.comb += [
                    self.wr_addr .eq(agu.addr_a),
                    self.wr_data .eq(x),
                    self.wr_en   .eq(1),
                ]
                m.next = "WRITE_Y"

            with m.State("WRITE_Y"):
                m.d.comb += [
                    self.wr_addr .eq(agu.addr_b),
                    self.wr_data .eq(y),
                    self.wr_en   .eq(1),
                    agu.advance  .eq(1),
                ]
                with m.If(agu.stage_done):
                    m.d.sync += self.bank_sel.eq(~self.bank_sel)
                with m.If(agu.fft_done):
                    m.next = "DONE"
                with m.Else():
                    m.next = "READ_A"

            with m.State("DONE"):
                m.d.comb += self.done.eq(1)
                m.next = "IDLE"

        m.d.comb += self.busy.eq(~fsm.ongoing("IDLE"))

        return m


class FFTCore(Elaboratable):
    '''
    N-point FP4 FFT core, N a power of two up to MAX_N

    Samples are loaded through `wr_*` in natural order (stored bit-reversed in
    bank 0) while idle; `start` runs one transform, `done` pulses for one cycle
    and the results are then read through `rd_*` in natural order, one cycle
    read latency. An invalid `n` at `start` latches `error` until `rst`.
    '''
    def __init__(self):
        # Configuration / control
        self.n       = Signal(range(MAX_N + 1))
        self.rst     = Signal()
        self.start   = Signal()
        self.done    = Signal()
        self.error   = Signal()
        self.busy    = Signal()
        # Load port
        self.wr_en   = Signal()
        self.wr_addr = Signal(range(MAX_N))
        self.wr_data = Signal(SAMPLE_WIDTH)
        # Readout port
        self.rd_addr = Signal(range(MAX_N))
        self.rd_data = Signal(SAMPLE_WIDTH)

    def elaborate(self, platform):
        m = Module()

        ctrl = FFTController()
        m.submodules.ctrl = ResetInserter(self.rst)(ctrl)
        m.submodules.mem  = mem = PingPongMemory()

        m.d.comb += [
            ctrl.n        .eq(self.n),
            ctrl.start    .eq(self.start),
            ctrl.rd_data  .eq(mem.rd_data),
            self.done     .eq(ctrl.done),
            self.error    .eq(ctrl.error),
            self.busy     .eq(ctrl.busy),
            self.rd_data  .eq(mem.rd_data),
            # Outside a transform bank_sel points at the results
            mem.rd_bank   .eq(ctrl.bank_sel),
        ]

        load_log2n = decode_size(m, self.n)

        # The sequencer owns the memory while busy
        with m.If(ctrl.busy):
            m.d.comb += [
                mem.rd_addr .eq(ctrl.rd_addr),
                mem.wr_bank .eq(~ctrl.bank_sel),
                mem.wr_addr .eq(ctrl.wr_addr),
                mem.wr_data .eq(ctrl.wr_data),
                mem.wr_en   .eq(ctrl.wr_en),
            ]
        with m.Else():
            m.d.comb += [
                mem.rd_addr .eq(self.rd_addr),
                mem.wr_bank .eq(0),
                mem.wr_addr .eq(reverse_address(self.wr_addr, load_log2n)),
                mem.wr_data .eq(self.wr_data),
                mem.wr_en   .eq(self.wr_en),
            ]

        return m
