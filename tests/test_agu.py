import unittest

from fp4_fft.agu import AddressGenerator, AddressSequencer, address_sequence
from fp4_fft.config import ConfigurationError
from sim_helper import simulate

SIZES = [2, 4, 8, 16, 32]

def dit_order(N):
    """Textbook in-place DIT loop nest"""
    order = []
    stages = N.bit_length() - 1
    for stage in range(stages):
        stride     = 1 << stage
        group_size = stride << 1
        for g in range(N // group_size):
            for j in range(stride):
                a = g * group_size + j
                order.append((stage, a, a + stride, j * (N // group_size)))
    return order

class TestAddressSequencer(unittest.TestCase):

    def test_order(self):
        for N in SIZES:
            self.assertListEqual([ tuple(b) for b in address_sequence(N) ], dit_order(N))

    def test_counts(self):
        for N in SIZES:
            agu = AddressSequencer(N)
            emitted, stage_pulses, fft_pulses = 0, 0, 0
            while not agu.finished:
                emitted += 1
                stage_done, fft_done = agu.advance()
                stage_pulses += stage_done
                fft_pulses += fft_done
                if fft_done:
                    self.assertTrue(agu.finished)
            self.assertEqual(emitted, (N // 2) * (N.bit_length() - 1))
            self.assertEqual(stage_pulses, N.bit_length() - 1)
            self.assertEqual(fft_pulses, 1)
            # Holds after completion
            self.assertEqual(agu.advance(), (False, False))

    def test_each_address_once_per_stage(self):
        for N in SIZES:
            for stage in range(N.bit_length() - 1):
                touched = [ a for b in address_sequence(N) if b.stage == stage for a in (b.addr_a, b.addr_b) ]
                self.assertListEqual(sorted(touched), list(range(N)))

    def test_invalid_size(self):
        for N in [0, 1, 6, 64]:
            with self.assertRaises(ConfigurationError):
                AddressSequencer(N)


class TestAddressGenerator(unittest.TestCase):

    def agu_testbench(self, N):
        dut = AddressGenerator()
        result = {}

        async def testbench(ctx):
            emitted = []
            stage_pulses = []
            fft_pulses = []
            ctx.set(dut.log2n, N.bit_length() - 1)
            ctx.set(dut.start, 1)
            await ctx.tick()
            ctx.set(dut.start, 0)
            ctx.set(dut.advance, 1)
            for i in range(4 * N * 5):
                if ctx.get(dut.finished):
                    break
                emitted.append((ctx.get(dut.stage), ctx.get(dut.addr_a),
                                ctx.get(dut.addr_b), ctx.get(dut.twiddle_k)))
                if ctx.get(dut.stage_done):
                    stage_pulses.append(i)
                if ctx.get(dut.fft_done):
                    fft_pulses.append(i)
                await ctx.tick()
            # Advancing past completion changes nothing
            held = (ctx.get(dut.stage), ctx.get(dut.addr_a))
            await ctx.tick()
            result.update(emitted=emitted, stage_pulses=stage_pulses, fft_pulses=fft_pulses,
                          held=held, after=(ctx.get(dut.stage), ctx.get(dut.addr_a)),
                          stage_done_after=ctx.get(dut.stage_done))

        simulate(dut, testbench)
        return result

    def test_sequence(self):
        for N in [4, 8, 16, 32]:
            with self.subTest(N=N):
                r = self.agu_testbench(N)
                count = (N // 2) * (N.bit_length() - 1)
                self.assertListEqual(r["emitted"], dit_order(N))
                self.assertEqual(len(r["stage_pulses"]), N.bit_length() - 1)
                self.assertListEqual(r["fft_pulses"], [count - 1])
                self.assertEqual(r["stage_pulses"][-1], count - 1)
                self.assertEqual(r["held"], r["after"])
                self.assertEqual(r["stage_done_after"], 0)

    def test_restart(self):
        dut = AddressGenerator()
        async def testbench(ctx):
            ctx.set(dut.log2n, 3)
            ctx.set(dut.start, 1)
            await ctx.tick()
            ctx.set(dut.start, 0)
            ctx.set(dut.advance, 1)
            for _ in range(5):
                await ctx.tick()
            ctx.set(dut.advance, 0)
            self.assertEqual(ctx.get(dut.stage), 1)
            ctx.set(dut.start, 1)
            await ctx.tick()
            ctx.set(dut.start, 0)
            self.assertEqual((ctx.get(dut.stage), ctx.get(dut.addr_a), ctx.get(dut.addr_b)), (0, 0, 1))
        simulate(dut, testbench)

if __name__ == "__main__":
    unittest.main()
