import logging
from amaranth import *
from ..exceptions import ConfigurationError
from .register import AddressDecodeParams

logger = logging.getLogger(__name__)

class AddressDecoder(Elaboratable):
    """Decodes a word address into a register selection, for a register map.

    Given `addr`, combinatorially drives:
        - `sel`, one-hot over register ids, set for the register containing the address
        - `offset`, the address relative to the start of that register, in words
        - `error`, set when the address doesn't belong to any register
    """

    def __init__(self, params: AddressDecodeParams, addr: Value):
        self.params = params
        self.ranges = params.ranges()

        end = self.ranges[-1].stop if self.ranges else 0
        if end > 2 ** params.address_width:
            raise ConfigurationError(
                "address_width",
                f"registers occupy {end} words, but an address width of {params.address_width} bits "
                f"only addresses {2 ** params.address_width}",
            )

        self.addr = addr
        self.sel = Signal(max(len(self.ranges), 1))
        self.offset = Signal(params.address_width)
        self.error = Signal()

    def elaborate(self, platform):
        m = Module()

        # Anything not claimed by a register is an error
        m.d.comb += self.error.eq(1)

        for register_id, addresses in enumerate(self.ranges):
            with m.If((self.addr >= addresses.start) & (self.addr < addresses.stop)):
                m.d.comb += [
                    self.sel[register_id].eq(1),
                    self.offset.eq(self.addr - addresses.start),
                    self.error.eq(0),
                ]

        return m
