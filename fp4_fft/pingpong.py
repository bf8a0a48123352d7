from amaranth import Elaboratable, Module, Signal, Cat, Mux
from amaranth.lib.memory import Memory

from .config import MAX_N, MAX_LOG2N, SAMPLE_WIDTH


def bit_reverse(addr, width):
    """Reverse the low `width` bits of `addr`"""
    result = 0
    for _ in range(width):
        result = (result << 1) | (addr & 1)
        addr >>= 1
    return result

def reverse_address(addr, log2n):
    """
    Gateware bit reversal over the low `log2n` bits of `addr`

    The full MAX_LOG2N-bit reversal leaves the wanted bits at the top, they
    are brought down by the unused width. An unsupported `log2n` (0) keeps
    the full width.
    """
    full  = Cat(*(addr[i] for i in reversed(range(MAX_LOG2N))))
    shift = Mux(log2n == 0, 0, (MAX_LOG2N - log2n).as_unsigned())
    return full >> shift


class PingPongBanks:
    """Two MAX_N-word banks addressed by (bank, addr)"""
    def __init__(self, depth=MAX_N):
        self.depth = depth
        self.banks = [ [0] * depth for _ in range(2) ]

    def read(self, bank, addr):
        return self.banks[bank][addr]

    def write(self, bank, addr, value):
        self.banks[bank][addr] = value & 0xFF

    def load(self, addr, value, log2n=MAX_LOG2N):
        """External load path: bank 0, bit-reversed address"""
        self.write(0, bit_reverse(addr, log2n), value)


class PingPongMemory(Elaboratable):
    '''
    Two memory banks with one synchronous read port and one write port each

    Read data is valid one cycle after `rd_addr` / `rd_bank` are presented.
    '''
    def __init__(self, depth=MAX_N):
        assert depth & (depth - 1) == 0, "depth must be a power of two"
        self.depth   = depth
        # Read port
        self.rd_bank = Signal()
        self.rd_addr = Signal(range(depth))
        self.rd_data = Signal(SAMPLE_WIDTH)
        # Write port
        self.wr_bank = Signal()
        self.wr_addr = Signal(range(depth))
        self.wr_data = Signal(SAMPLE_WIDTH)
        self.wr_en   = Signal()

    def elaborate(self, platform):
        m = Module()

        banks = [ Memory(shape=SAMPLE_WIDTH, depth=self.depth, init=[]) for _ in range(2) ]
        m.submodules.bank0, m.submodules.bank1 = banks

        rd_ports = [ bank.read_port() for bank in banks ]
        wr_ports = [ bank.write_port() for bank in banks ]

        for i, (rd, wr) in enumerate(zip(rd_ports, wr_ports)):
            m.d.comb += [
                rd.addr .eq(self.rd_addr),
                wr.addr .eq(self.wr_addr),
                wr.data .eq(self.wr_data),
                wr.en   .eq(self.wr_en & (self.wr_bank == i)),
            ]

        # Output mux follows the bank selected when the read was issued
        rd_bank = Signal()
        m.d.sync += rd_bank.eq(self.rd_bank)
        m.d.comb += self.rd_data.eq(Mux(rd_bank, rd_ports[1].data, rd_ports[0].data))

        return m
