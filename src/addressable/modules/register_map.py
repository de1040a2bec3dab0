import logging
from amaranth import *
from amaranth.hdl import Format, Print
from typing import Callable, List, Optional, Tuple
from ..exceptions import ConfigurationError, RegisterMapFrozenError
from .register import AddressDecodeParams, RegisterDescription

logger = logging.getLogger(__name__)

class RegisterMap:
    """Allocates registers of arbitrary widths into a flat, word-addressable address space.

    Each register occupies a whole number of data-width chunks. Addresses are expressed in
    units of the word width, which may be narrower than the data width, so every chunk takes
    up `ratio` consecutive addresses:

        map = RegisterMap(data_width=32, address_width=8, word_width=8)
        map.create_register(ctrl, "ctrl")      # offset 0x0
        map.create_register(status, "status")  # offset 0x4

    Once all registers are created, `addr_decode_params` sizes the address decoder, and the
    `read`/`write` accessors of each `RegisterDescription` implement bus accesses.
    """

    # Permitted ratios of data width to word width. Converting a word address into a chunk
    # index must be a plain shift.
    VALID_RATIOS = (1, 2, 4, 8)

    def __init__(self, data_width: int, address_width: int, word_width: Optional[int] = None):
        if word_width is None:
            word_width = data_width

        for key, value in [
            ("data_width", data_width),
            ("address_width", address_width),
            ("word_width", word_width),
        ]:
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(key, f"must be a positive integer, got {value!r}")

        if data_width % word_width != 0:
            raise ConfigurationError(
                "word_width",
                f"data width {data_width} is not a multiple of word width {word_width}",
            )

        ratio = data_width // word_width
        if ratio not in RegisterMap.VALID_RATIOS:
            raise ConfigurationError(
                "word_width",
                f"data width to word width ratio must be one of {RegisterMap.VALID_RATIOS}, got {ratio}",
            )

        # Static configuration
        self.data_width = data_width
        self.address_width = address_width
        self.word_width = word_width
        self.ratio = ratio
        self.ratio_shift = ratio.bit_length() - 1

        # Allocation state
        self._registers: List[RegisterDescription] = []
        self._current_offset = 0
        self._current_id = 0
        self._frozen = False

    @property
    def registers(self) -> Tuple[RegisterDescription, ...]:
        """All registers, in allocation order."""
        return tuple(self._registers)

    @property
    def size(self) -> int:
        """The number of words allocated so far."""
        return self._current_offset

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self):
        return len(self._registers)

    def __iter__(self):
        return iter(self.registers)

    def freeze(self):
        """Ends the build phase. Adding further registers raises `RegisterMapFrozenError`."""

        if not self._frozen:
            logger.debug(f"Register map frozen with {len(self._registers)} registers, {self.size} words")
        self._frozen = True

    def num_chunks(self, width: int) -> int:
        """The number of data-width chunks needed to hold a register of the given width."""
        return (width + self.data_width - 1) // self.data_width

    def chunk_index(self, raw_offset):
        """Converts an offset in words into an index of a data-width chunk.

        Works on both integers and Amaranth values. Low bits addressing a word within a chunk
        are discarded, since each access transfers the full chunk.
        """
        return raw_offset >> self.ratio_shift

    def add_register(self, name: str, width: int, read: Callable, write: Callable) -> RegisterDescription:
        """Allocates space for a register with the given accessors, after any existing registers."""

        if self._frozen:
            raise RegisterMapFrozenError(name)
        self._check_width(name, width)

        if self.address_of(name) is not None:
            logger.warning(f"Register name '{name}' is already in use, lookups will find the first one")

        register = RegisterDescription(
            name=name,
            width=width,
            offset=self._current_offset,
            id=self._current_id,
            read=read,
            write=write,
        )
        self._registers.append(register)

        # Every chunk spans `ratio` words
        self._current_offset += self.num_chunks(width) * self.ratio
        self._current_id += 1

        logger.debug(
            f"Allocated register '{name}' ({width} bits) at offset {register.offset:#x}, id {register.id}"
        )
        return register

    def create_register(self, register, name: str, read_only: bool = False, verbose: bool = False) -> RegisterDescription:
        """Creates a register backed by the given signal, generating its accessors.

        Writes replace the entire contents of `register`, so it must not be driven from
        anywhere other than the module which executes the write statements. If `read_only` is
        set, writes are discarded. If `verbose` is set, writes are printed during simulation.
        """

        bits = Value.cast(register)
        width = len(bits)
        self._check_width(name, width)

        # Bit ranges of each chunk - the last one is shorter if the width isn't a multiple of the
        # data width
        slices = [
            (start, min(start + self.data_width, width))
            for start in range(0, width, self.data_width)
        ]

        def read(chunk_index):
            chunk_index = Value.cast(chunk_index)

            # Unknown chunks read as zero
            out = C(0, self.data_width)
            for i, (start, end) in enumerate(slices):
                out = Mux(chunk_index == i, bits[start:end], out)

            return out

        def write(chunk_index, value):
            chunk_index = Value.cast(chunk_index)
            value = Value.cast(value)

            # Rebuild the whole register, substituting only the targeted chunk
            segments = [
                Mux(chunk_index == i, value[:end - start], bits[start:end])
                for i, (start, end) in enumerate(slices)
            ]
            new_value = Cat(*segments)

            statements = [bits.eq(new_value)]
            if verbose:
                statements.append(Print(f"Register {name} written with value", Format("{:x}", new_value)))
            return statements

        def read_only_write(chunk_index, value):
            if verbose:
                return [
                    Print(
                        f"Attempted write to read-only register {name} with value",
                        Format("{:x}", Value.cast(value)),
                    )
                ]
            return []

        return self.add_register(name, width, read, read_only_write if read_only else write)

    def memory_sizes(self) -> List[int]:
        """The number of data-width chunks occupied by each register, in allocation order."""
        return [self.num_chunks(register.width) for register in self._registers]

    def addr_decode_params(self) -> AddressDecodeParams:
        return AddressDecodeParams(
            data_width=self.data_width,
            address_width=self.address_width,
            memory_sizes=self.memory_sizes(),
            word_width=self.word_width,
        )

    def address_of(self, name: str) -> Optional[int]:
        """The offset of the first register with the given name, or `None` if there isn't one."""

        for register in self._registers:
            if register.name == name:
                return register.offset
        return None

    def _check_width(self, name: str, width: int):
        if width <= 0:
            raise ConfigurationError(
                "width",
                f"register '{name}' must have a positive width, got {width}",
                details={"register": name},
            )
