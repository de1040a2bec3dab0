from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

@dataclass(frozen=True)
class RegisterDescription:
    """
    A register allocated within a `RegisterMap`.

    Reads are combinatorial, and writes are executed in the sequential domain. Both accessors
    take a chunk index, in units of the map's data width, rather than a raw word address.
    """

    # The name given when the register was created. Used for lookups and header generation.
    name: str

    # Width of the underlying register, in bits. Independent of the bus widths.
    width: int

    # Starting address of the register, in units of the map's word width.
    offset: int

    # Allocation order, used as the index into the address decoder's selection vector.
    id: int

    # A callable taking a chunk index, which returns a data-width value for that chunk.
    read: Callable = field(repr=False, compare=False)

    # A callable taking a chunk index and a data-width value, which returns the list of
    # assignments to execute to perform the write.
    write: Callable = field(repr=False, compare=False)


@dataclass(frozen=True)
class AddressDecodeParams:
    """Sizing of a register map, as needed by an address decoder."""

    data_width: int
    address_width: int

    # Number of data-width chunks occupied by each register, in allocation order.
    memory_sizes: Tuple[int, ...]

    # Smallest addressable unit of the bus, in bits.
    word_width: Optional[int] = None

    def __post_init__(self):
        if self.word_width is None:
            object.__setattr__(self, "word_width", self.data_width)
        object.__setattr__(self, "memory_sizes", tuple(self.memory_sizes))

    @property
    def ratio(self) -> int:
        return self.data_width // self.word_width

    def ranges(self) -> List[range]:
        """The word addresses belonging to each register, contiguous from zero."""

        ranges = []
        base = 0
        for size in self.memory_sizes:
            words = size * self.ratio
            ranges.append(range(base, base + words))
            base += words
        return ranges
