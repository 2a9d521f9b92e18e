"""Destination stores for packed glyph data.

An atlas sink receives the packed word block of a glyph and answers with
the location at which it stored it. A sink that cannot take the block
raises AtlasError; it never stores part of a block.
"""

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Protocol, runtime_checkable

import structlog

from glyphrays.exceptions import AtlasFullError

logger = structlog.get_logger(__name__)


class ReturnCode(Enum):
    """Result of handing a glyph to an atlas."""

    SUCCESS = "success"
    FAILURE = "failure"

    def __bool__(self) -> bool:
        return self is ReturnCode.SUCCESS


class GlyphAttributeIndex(IntEnum):
    """Meaning of each attribute written by upload_to_atlas().

    The glyph data is offset so that the bottom left corner of the glyph
    has glyph coordinate (0, 0) and the top right corner has glyph
    coordinate (width, height).
    """

    GLYPH_COORDINATE_X = 0
    GLYPH_COORDINATE_Y = 1
    GLYPH_WIDTH = 2
    GLYPH_HEIGHT = 3
    GLYPH_OFFSET = 4


GLYPH_NUM_ATTRIBUTES = len(GlyphAttributeIndex)

# Corner order of GlyphAttribute.data
CORNER_BOTTOM_LEFT = 0
CORNER_BOTTOM_RIGHT = 1
CORNER_TOP_LEFT = 2
CORNER_TOP_RIGHT = 3


@dataclass(frozen=True, slots=True)
class GlyphAttribute:
    """One attribute value per corner of the quad that draws a glyph.

    Attributes:
        data: Values for (bottom-left, bottom-right, top-left, top-right)
    """

    data: tuple[int, int, int, int]

    @classmethod
    def constant(cls, value: int) -> "GlyphAttribute":
        """Attribute with the same value at every corner."""
        return cls((value, value, value, value))


@runtime_checkable
class AtlasSink(Protocol):
    """Destination for packed glyph data."""

    def allocate_data(self, words: Sequence[int]) -> int:
        """Store a block of 32-bit words.

        Returns:
            Location of the first word in the store

        Raises:
            AtlasError: If the block cannot be stored
        """
        ...


class GlyphAtlas:
    """In-memory store of 32-bit words with a fixed capacity.

    Blocks are placed one after the other; a block that does not fit is
    rejected whole.

    Example:
        atlas = GlyphAtlas(capacity=1 << 20)
        location = atlas.allocate_data(packed.words)
    """

    def __init__(self, capacity: int) -> None:
        """Initialize the atlas.

        Args:
            capacity: Number of words the store can hold
        """
        self._capacity = capacity
        self._store: list[int] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """Number of words in use."""
        return len(self._store)

    @property
    def available(self) -> int:
        return self._capacity - len(self._store)

    @property
    def data(self) -> list[int]:
        """Copy of the words stored so far."""
        return list(self._store)

    def allocate_data(self, words: Sequence[int]) -> int:
        """Append a block of words.

        Raises:
            AtlasFullError: If fewer than len(words) words are free
        """
        if len(words) > self.available:
            logger.warning(
                "Atlas allocation rejected",
                requested=len(words),
                available=self.available,
            )
            raise AtlasFullError(len(words), self.available)
        location = len(self._store)
        self._store.extend(words)
        return location

    def read(self, location: int, count: int) -> list[int]:
        """Read count words starting at location."""
        return self._store[location:location + count]

    def clear(self) -> None:
        """Drop every stored block."""
        self._store.clear()

    def to_bytes(self) -> bytes:
        """The store as little-endian 32-bit words."""
        return struct.pack(f"<{len(self._store)}I", *self._store)
