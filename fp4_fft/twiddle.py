from amaranth import Elaboratable, Module, Signal, Mux
from amaranth.lib.memory import Memory

import numpy as np

from .config import MAX_N, MAX_LOG2N, SAMPLE_WIDTH
from .types.complex import from_complex

# W_32^i = cos(2*pi*i/32) - j*sin(2*pi*i/32), quantized to FP4
TWIDDLE_TABLE = [
    0x20, 0x20, 0x29, 0x29, 0x19, 0x1A, 0x1A, 0x0A,
    0x0A, 0x0A, 0x9A, 0x9A, 0x99, 0xA9, 0xA9, 0xA0,
    0xA0, 0xA0, 0xA1, 0xA1, 0x91, 0x92, 0x92, 0x02,
    0x02, 0x02, 0x12, 0x12, 0x11, 0x21, 0x21, 0x20,
]


def generate_twiddle_table(size=MAX_N):
    w = np.exp(-2j * np.pi * np.arange(size) / size)
    return [ from_complex(x) for x in w ]

def twiddle_factor(k, n):
    """W_n^k looked up in the MAX_N-point table, 0 for unsupported sizes"""
    if n < 2 or n > MAX_N or n & (n - 1):
        return 0
    scaled_k = k << (MAX_LOG2N - (n.bit_length() - 1))
    return TWIDDLE_TABLE[scaled_k % MAX_N]


class TwiddleROM(Elaboratable):
    def __init__(self):
        self.k     = Signal(MAX_LOG2N)
        self.log2n = Signal(range(MAX_LOG2N + 1))
        self.data  = Signal(SAMPLE_WIDTH)

    def elaborate(self, platform):
        m = Module()

        m.submodules.rom = rom = Memory(shape=SAMPLE_WIDTH, depth=MAX_N, init=TWIDDLE_TABLE)
        rom_rd = rom.read_port(domain="comb")

        # Rescale k to the MAX_N domain, address wraps modulo MAX_N
        supported = (self.log2n >= 1) & (self.log2n <= MAX_LOG2N)
        m.d.comb += [
            rom_rd.addr .eq(self.k << (MAX_LOG2N - self.log2n).as_unsigned()),
            self.data   .eq(Mux(supported, rom_rd.data, 0)),
        ]

        return m
