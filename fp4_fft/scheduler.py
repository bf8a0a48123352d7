"""
Cycle-level software model of the FFT sequencer

`FFTScheduler` walks the same state machine as the gateware controller, one
state per `step()`. Memory reads are immediate: the read-before-write order
inside each butterfly is what matters, not the read latency.
"""
import logging
from enum import Enum

from .config import MAX_N, MAX_LOG2N, ConfigurationError, is_valid_size
from .agu import AddressSequencer
from .butterfly import butterfly
from .pingpong import PingPongBanks
from .twiddle import twiddle_factor
from .types.complex import from_complex_array, to_complex_array

logger = logging.getLogger(__name__)


class State(Enum):
    IDLE    = "idle"
    INIT    = "init"
    READ_A  = "read_a"
    READ_B  = "read_b"
    COMPUTE = "compute"
    WRITE_X = "write_x"
    WRITE_Y = "write_y"
    DONE    = "done"


class FFTScheduler:
    def __init__(self, n=MAX_N):
        self.n      = n
        self.memory = PingPongBanks()
        self.reset()

    def reset(self):
        """Return every control register to its initial value, memory is kept"""
        self.state    = State.IDLE
        self.bank_sel = 0
        self.error    = False
        self.done     = False
        self.agu      = None
        self.op_a     = 0
        self.op_b     = 0
        self.x        = 0
        self.y        = 0
        self._start   = False

    @property
    def busy(self):
        return self.state is not State.IDLE

    @property
    def result_bank(self):
        return self.bank_sel

    def load(self, addr, word):
        """Store an input sample, natural order `addr` (stored bit-reversed)"""
        if self.busy:
            raise RuntimeError("cannot load samples while a transform is running")
        valid = is_valid_size(self.n)
        limit = self.n if valid else MAX_N
        if not 0 <= addr < limit:
            raise ConfigurationError(f"sample address {addr} out of range for {limit} points")
        log2n = self.n.bit_length() - 1 if valid else MAX_LOG2N
        self.memory.load(addr, word, log2n)

    def load_all(self, words):
        for addr, word in enumerate(words):
            self.load(addr, word)

    def read(self, addr):
        return self.memory.read(self.result_bank, addr)

    def results(self):
        return [ self.read(addr) for addr in range(self.n) ]

    def start(self):
        """Request a transform, taken on the next `step()` from IDLE"""
        self._start = True

    def step(self):
        self.done  = False
        handler    = self._TRANSITIONS[self.state]
        self.state = handler(self)
        self._start = False

    def run(self, max_steps=None):
        """
        Start a transform and step until it finishes

        Returns True when `done` was reached, False when the size was rejected.
        """
        max_steps = max_steps or 8 * MAX_N * MAX_LOG2N
        self.start()
        for _ in range(max_steps):
            self.step()
            if self.done:
                return True
            if self.error:
                return False
        raise RuntimeError(f"transform did not finish within {max_steps} steps")

    # State handlers, each returns the next state

    def _idle(self):
        if not self._start:
            return State.IDLE
        if self.error or not is_valid_size(self.n):
            if not self.error:
                logger.warning("rejecting transform size %r, error latched until reset", self.n)
            self.error = True
            return State.IDLE
        self.agu      = AddressSequencer(self.n)
        self.bank_sel = 0
        logger.debug("starting %d-point transform", self.n)
        return State.INIT

    def _init(self):
        return State.READ_A

    def _read_a(self):
        self.op_a = self.memory.read(self.bank_sel, self.agu.addr_a)
        return State.READ_B

    def _read_b(self):
        self.op_b = self.memory.read(self.bank_sel, self.agu.addr_b)
        return State.COMPUTE

    def _compute(self):
        w = twiddle_factor(self.agu.twiddle_k, self.n)
        self.x, self.y = butterfly(self.op_a, self.op_b, w)
        return State.WRITE_X

    def _write_x(self):
        self.memory.write(self.bank_sel ^ 1, self.agu.addr_a, self.x)
        return State.WRITE_Y

    def _write_y(self):
        self.memory.write(self.bank_sel ^ 1, self.agu.addr_b, self.y)
        stage = self.agu.stage
        stage_done, fft_done = self.agu.advance()
        if stage_done:
            self.bank_sel ^= 1
            logger.debug("stage %d complete, reading bank %d", stage, self.bank_sel)
        return State.DONE if fft_done else State.READ_A

    def _done(self):
        self.done = True
        logger.info("%d-point transform done, results in bank %d", self.n, self.bank_sel)
        return State.IDLE

    _TRANSITIONS = {
        State.IDLE:    _idle,
        State.INIT:    _init,
        State.READ_A:  _read_a,
        State.READ_B:  _read_b,
        State.COMPUTE: _compute,
        State.WRITE_X: _write_x,
        State.WRITE_Y: _write_y,
        State.DONE:    _done,
    }


def transform(words):
    """FFT of a list of packed FP4 complex words, natural order in and out"""
    scheduler = FFTScheduler(len(words))
    scheduler.load_all(words)
    if not scheduler.run():
        raise ConfigurationError(f"unsupported transform size {len(words)}")
    return scheduler.results()

def transform_complex(values):
    """Quantize complex values to FP4, transform them and decode the result"""
    return to_complex_array(transform(from_complex_array(values)))
