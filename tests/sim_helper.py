from amaranth.sim import Simulator
from contextlib import nullcontext


def simulate(dut, testbench, clocked=True, vcd_file=None, gtkw_file=None):
    sim = Simulator(dut)
    if clocked:
        sim.add_clock(1e-6)
    sim.add_testbench(testbench)

    if vcd_file is not None:
        sim_context = sim.write_vcd(vcd_file=vcd_file, gtkw_file=gtkw_file)
    else:
        sim_context = nullcontext()

    with sim_context:
        sim.run()


def evaluate(dut, output, inputs_sequence):
    """
    Drive a combinational `dut` with each list of (signal, value) pairs and
    collect `output`, which may also be a tuple of signals
    """
    out = []
    async def testbench(ctx):
        for inputs in inputs_sequence:
            for signal, value in inputs:
                ctx.set(signal, value)
            if isinstance(output, tuple):
                out.append(tuple(ctx.get(o) for o in output))
            else:
                out.append(ctx.get(output))
    simulate(dut, testbench, clocked=False)
    return out
