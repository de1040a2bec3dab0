from amaranth import *
from typing import Optional
from .addr_decode import AddressDecoder
from .register_map import RegisterMap

class RegisterPeripheral(Elaboratable):
    """Base class for a memory-mapped peripheral, whose registers are allocated by a `RegisterMap`.

    Subclasses create their registers in `__init__`, then call `handle_registers` from
    `elaborate`. Any logic which also updates a writable register must live in the same
    `elaborate`, since the register's write handler assigns all of its bits.

    Bus signals which aren't provided are created, sized by the register map.
    """

    def __init__(
        self,
        register_map: RegisterMap,
        mem_addr: Optional[Signal] = None, mem_read_data: Optional[Signal] = None, mem_read_en: Optional[Signal] = None,
        mem_write_data: Optional[Signal] = None, mem_write_en: Optional[Signal] = None,
    ):
        self.register_map = register_map

        # Memory interface signals
        self.mem_addr = mem_addr if mem_addr is not None else Signal(register_map.address_width)
        self.mem_read_data = mem_read_data if mem_read_data is not None else Signal(register_map.data_width)
        self.mem_read_en = mem_read_en if mem_read_en is not None else Signal()
        self.mem_write_data = mem_write_data if mem_write_data is not None else Signal(register_map.data_width)
        self.mem_write_en = mem_write_en if mem_write_en is not None else Signal()

        # Raised while an access targets an address with no register
        self.error = Signal()

    def ports(self):
        return [
            self.mem_addr, self.mem_read_data, self.mem_read_en,
            self.mem_write_data, self.mem_write_en, self.error,
        ]

    def handle_registers(self, m: Module):
        """Generate decoder and handler code for every register in the map.

        This ends the register map's build phase.
        """

        self.register_map.freeze()

        decoder = AddressDecoder(self.register_map.addr_decode_params(), self.mem_addr)
        m.submodules.addr_decode = decoder

        # The decoder's offset is in words, but accessors take chunks
        chunk_index = self.register_map.chunk_index(decoder.offset)

        m.d.comb += self.error.eq(decoder.error & (self.mem_read_en | self.mem_write_en))

        # Writers
        for register in self.register_map.registers:
            with m.If(self.mem_write_en & decoder.sel[register.id]):
                m.d.sync += register.write(chunk_index, self.mem_write_data)

        # Readers
        for register in self.register_map.registers:
            with m.If(self.mem_read_en & decoder.sel[register.id]):
                m.d.comb += self.mem_read_data.eq(register.read(chunk_index))


class RegisterBank(RegisterPeripheral):
    """A peripheral consisting only of its registers, which are accessed solely through the bus."""

    def elaborate(self, platform) -> Module:
        m = Module()
        self.handle_registers(m)
        return m
