from amaranth import *
from amaranth.sim import Simulator
from typing import Callable, Optional

from addressable.modules.register_map import RegisterMap

class AccessorHarness(Elaboratable):
    """Drives the accessors of a single register from signals.

    Select a chunk with `chunk`, then:
        - Read from `read_data` straight away
        - Write by setting `write_en` and `write_data`, then waiting one cycle
    """

    def __init__(self, width: int, data_width: int, word_width: Optional[int] = None, read_only=False, init=0, verbose=False):
        self.register_map = RegisterMap(data_width, 16, word_width)
        self.storage = Signal(width, init=init)
        self.register = self.register_map.create_register(self.storage, "reg", read_only=read_only, verbose=verbose)

        self.chunk = Signal(8)
        self.read_data = Signal(data_width)
        self.write_data = Signal(data_width)
        self.write_en = Signal()

        # Keeps the sync domain alive when the register is read-only
        self.cycles = Signal(8)

    def elaborate(self, platform):
        m = Module()

        m.d.sync += self.cycles.eq(self.cycles + 1)
        m.d.comb += self.read_data.eq(self.register.read(self.chunk))
        with m.If(self.write_en):
            m.d.sync += self.register.write(self.chunk, self.write_data)

        return m

    async def write(self, ctx, chunk, value):
        ctx.set(self.chunk, chunk)
        ctx.set(self.write_data, value)
        ctx.set(self.write_en, 1)
        await ctx.tick()
        ctx.set(self.write_en, 0)

    def read(self, ctx, chunk):
        ctx.set(self.chunk, chunk)
        return ctx.get(self.read_data)


def run_sim(dut: Elaboratable, bench: Callable, clock=True):
    """Creates and runs a simulator for the given module, with `bench` as its testbench."""

    sim = Simulator(dut)
    if clock:
        sim.add_clock(1e-6) # 1 MHz
    sim.add_testbench(bench)
    sim.run()
