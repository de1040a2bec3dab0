from amaranth import *

from helpers import AccessorHarness, run_sim

def test_full_width_round_trip():
    """Tests that a register the same width as the bus reads back what was written."""

    dut = AccessorHarness(width=32, data_width=32)

    async def bench(ctx):
        for value in [0xDEADBEEF, 0, 1, 0xFFFFFFFF, 0x80000000]:
            await dut.write(ctx, 0, value)
            assert dut.read(ctx, 0) == value
            assert ctx.get(dut.storage) == value

    run_sim(dut, bench)

def test_narrow_register():
    """Tests that a register narrower than the bus keeps only its own bits."""

    dut = AccessorHarness(width=5, data_width=8)

    async def bench(ctx):
        for value in range(2 ** 5):
            await dut.write(ctx, 0, value)
            assert dut.read(ctx, 0) == value

        await dut.write(ctx, 0, 0xFF)
        assert dut.read(ctx, 0) == 0x1F

    run_sim(dut, bench)

def test_partial_tail_zero_extension():
    """Tests that the final, partial chunk of a register is zero-extended on read."""

    dut = AccessorHarness(width=20, data_width=8)
    assert dut.register_map.num_chunks(20) == 3

    async def bench(ctx):
        await dut.write(ctx, 2, 0xFF)
        assert dut.read(ctx, 2) == 0x0F
        assert ctx.get(dut.storage) == 0x0F0000

    run_sim(dut, bench)

def test_chunk_isolation():
    """Tests that writing one chunk leaves the others untouched."""

    dut = AccessorHarness(width=20, data_width=8)

    async def bench(ctx):
        await dut.write(ctx, 0, 0xAA)
        await dut.write(ctx, 2, 0x05)
        assert ctx.get(dut.storage) == 0x500AA

        await dut.write(ctx, 1, 0x55)
        assert dut.read(ctx, 0) == 0xAA
        assert dut.read(ctx, 1) == 0x55
        assert dut.read(ctx, 2) == 0x05
        assert ctx.get(dut.storage) == 0x555AA

        # Overwrite the middle again
        await dut.write(ctx, 1, 0x00)
        assert dut.read(ctx, 0) == 0xAA
        assert dut.read(ctx, 2) == 0x05

    run_sim(dut, bench)

def test_wide_register():
    """Tests a register spanning several whole chunks."""

    dut = AccessorHarness(width=64, data_width=32)

    async def bench(ctx):
        await dut.write(ctx, 1, 0xCAFEBABE)
        await dut.write(ctx, 0, 0x12345678)
        assert ctx.get(dut.storage) == 0xCAFEBABE12345678
        assert dut.read(ctx, 0) == 0x12345678
        assert dut.read(ctx, 1) == 0xCAFEBABE

    run_sim(dut, bench)

def test_unknown_chunk():
    """Tests that chunks past the end of the register read as zero and ignore writes."""

    dut = AccessorHarness(width=20, data_width=8, init=0xABCDE)

    async def bench(ctx):
        assert dut.read(ctx, 3) == 0
        assert dut.read(ctx, 200) == 0

        await dut.write(ctx, 3, 0xFF)
        assert ctx.get(dut.storage) == 0xABCDE
        assert dut.read(ctx, 0) == 0xDE
        assert dut.read(ctx, 1) == 0xBC
        assert dut.read(ctx, 2) == 0x0A

    run_sim(dut, bench)

def test_read_only():
    """Tests that writes to a read-only register are discarded."""

    dut = AccessorHarness(width=16, data_width=16, read_only=True, init=0x1234)

    async def bench(ctx):
        assert dut.read(ctx, 0) == 0x1234

        for value in [0, 0xFFFF, 0x4321]:
            await dut.write(ctx, 0, value)
            assert dut.read(ctx, 0) == 0x1234
            assert ctx.get(dut.storage) == 0x1234

    run_sim(dut, bench)

def test_constant_accessor_arguments():
    """Tests that accessors accept plain integers as well as signals."""

    dut = AccessorHarness(width=12, data_width=8, init=0xABC)

    async def bench(ctx):
        assert ctx.get(dut.register.read(0)) == 0xBC
        assert ctx.get(dut.register.read(1)) == 0x0A
        assert ctx.get(dut.register.read(2)) == 0

    run_sim(dut, bench)

def test_write_statements():
    """Tests the statements produced by write accessors."""

    storage = Signal(32)
    dut = AccessorHarness(width=8, data_width=8)
    register_map = dut.register_map

    writable = register_map.create_register(storage, "writable")
    assert len(writable.write(0, 1)) == 1

    read_only = register_map.create_register(Signal(8), "read_only", read_only=True)
    assert read_only.write(0, 1) == []

    verbose = register_map.create_register(Signal(8), "verbose", verbose=True)
    assert len(verbose.write(0, 1)) == 2

    verbose_read_only = register_map.create_register(Signal(8), "verbose_read_only", read_only=True, verbose=True)
    assert len(verbose_read_only.write(0, 1)) == 1

def test_read_shape():
    """Tests that reads are always exactly one data width wide."""

    dut = AccessorHarness(width=3, data_width=16)
    assert len(dut.register.read(0)) == 16

    wide = AccessorHarness(width=40, data_width=16)
    assert len(wide.register.read(wide.chunk)) == 16

def test_verbose_write(capsys):
    """Tests that a verbose register prints every value written to it during simulation."""

    dut = AccessorHarness(width=12, data_width=8, verbose=True)

    async def bench(ctx):
        await dut.write(ctx, 0, 0xAB)
        await dut.write(ctx, 1, 0xFF)

    run_sim(dut, bench)

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "Register reg written with value ab",
        "Register reg written with value fab",
    ]

def test_verbose_read_only_write(capsys):
    """Tests that attempted writes to a verbose read-only register are printed, and discarded."""

    dut = AccessorHarness(width=8, data_width=8, read_only=True, init=0x12, verbose=True)

    async def bench(ctx):
        await dut.write(ctx, 0, 0x5A)
        assert ctx.get(dut.storage) == 0x12

    run_sim(dut, bench)

    assert capsys.readouterr().out.splitlines() == [
        "Attempted write to read-only register reg with value 5a",
    ]
