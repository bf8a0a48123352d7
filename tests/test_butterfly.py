import unittest
import random

from fp4_fft.butterfly import Butterfly, butterfly
from fp4_fft.twiddle import TWIDDLE_TABLE
from fp4_fft.types.complex import from_complex, to_complex
from sim_helper import evaluate

class TestButterfly(unittest.TestCase):

    def test_model(self):
        one, zero = from_complex(1), from_complex(0)
        self.assertEqual(butterfly(one, zero, one), (one, one))
        self.assertEqual(butterfly(one, one, one), (from_complex(2), zero))
        # W = -j rotates B before the add / subtract
        x, y = butterfly(from_complex(1), from_complex(1), from_complex(-1j))
        self.assertEqual(to_complex(x), 1 - 1j)
        self.assertEqual(to_complex(y), 1 + 1j)

    def test_gateware(self):
        dut = Butterfly()
        rng = random.Random(0)
        cases = [ (rng.randrange(256), rng.randrange(256), rng.choice(TWIDDLE_TABLE)) for _ in range(300) ]
        inputs = [ [(dut.a, a), (dut.b, b), (dut.w, w)] for a, b, w in cases ]
        out = evaluate(dut, (dut.x, dut.y), inputs)
        expected = [ butterfly(a, b, w) for a, b, w in cases ]
        self.assertListEqual(out, expected)

if __name__ == "__main__":
    unittest.main()
