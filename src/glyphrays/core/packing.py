"""Bit-exact packing of a glyph hierarchy into 32-bit words.

The packed glyph is a single block of 32-bit words laid out as
[hierarchy][curve lists][points]; every offset stored in the block is
relative to the start of the block.

Hierarchy word (bit 31 tells node from leaf):
    node:  bit 31 = 1, bit 30 = split axis (0 = x, 1 = y),
           bits 0-14 = child0 offset, bits 15-29 = child1 offset
    leaf:  bit 31 = 0, bits 0-15 = curve list offset,
           bits 16-30 = curve list size (number of curves)
A leaf word is always followed by its winding sample word:
    bits 0-15 = winding + WINDING_BIAS,
    bits 16-23 = delta x, bits 24-31 = delta y
    sample = box_min + delta * box_size / DELTA_DIV_FACTOR

Curve list word: two 16-bit entries (bits 0-15 and 16-31). An entry has
the degree in bit 15 (1 = quadratic) and the offset of the curve's first
point in bits 0-14. An odd-length list leaves the last high entry zero.

Point word: x in bits 0-15, y in bits 16-31, glyph-local and unsigned.
A curve's points are consecutive: start, [control], end.

Any value that does not fit its field raises PackingError; nothing is
ever truncated.
"""

import struct
from dataclasses import dataclass, field
from fractions import Fraction

import structlog

from glyphrays.core.hierarchy import (
    DELTA_DIV_FACTOR,
    Hierarchy,
    HierarchyLeaf,
    HierarchyNode,
    sample_point,
)
from glyphrays.domain import Box, CurveDegree, Point, SplitAxis
from glyphrays.exceptions import PackingError

logger = structlog.get_logger(__name__)

# Hierarchy packing
HIERARCHY_IS_NODE_BIT = 31
HIERARCHY_SPLITTING_COORDINATE_BIT = 30
HIERARCHY_CHILD0_OFFSET_BIT0 = 0
HIERARCHY_CHILD1_OFFSET_BIT0 = 15
HIERARCHY_CHILD_OFFSET_NUMBITS = 15
HIERARCHY_LEAF_CURVE_LIST_BIT0 = 0
HIERARCHY_LEAF_CURVE_LIST_NUMBITS = 16
HIERARCHY_LEAF_CURVE_LIST_SIZE_BIT0 = 16
HIERARCHY_LEAF_CURVE_LIST_SIZE_NUMBITS = 15

# Winding sample packing
WINDING_BIAS = 32768
WINDING_VALUE_BIT0 = 0
WINDING_VALUE_NUMBITS = 16
DELTA_X_BIT0 = 16
DELTA_Y_BIT0 = 24
DELTA_NUMBITS = 8

# Curve list packing
CURVE_NUMBITS = 16
CURVE_ENTRY0_BIT0 = 0
CURVE_ENTRY1_BIT0 = 16
CURVE_IS_QUADRATIC_BIT = 15
CURVE_LOCATION_BIT0 = 0
CURVE_LOCATION_NUMBITS = 15

# Point packing
POINT_COORDINATE_NUMBITS = 16
POINT_X_COORDINATE_BIT0 = 0
POINT_Y_COORDINATE_BIT0 = 16


def pack_bits(bit0: int, numbits: int, value: int, field_name: str = "value") -> int:
    """Place a value into a bit field.

    Args:
        bit0: First bit of the field
        numbits: Width of the field
        value: Unsigned value to store
        field_name: Name reported if the value does not fit

    Returns:
        The value shifted into position

    Raises:
        PackingError: If value is negative or needs more than numbits bits
    """
    if value < 0 or value >= (1 << numbits):
        raise PackingError(field_name, value, numbits)
    return value << bit0


def unpack_bits(bit0: int, numbits: int, word: int) -> int:
    """Extract a bit field from a word."""
    return (word >> bit0) & ((1 << numbits) - 1)


def pack_node(axis: SplitAxis, child0: int, child1: int) -> int:
    """Pack an internal hierarchy node."""
    return (
        (1 << HIERARCHY_IS_NODE_BIT)
        | (int(axis) << HIERARCHY_SPLITTING_COORDINATE_BIT)
        | pack_bits(HIERARCHY_CHILD0_OFFSET_BIT0, HIERARCHY_CHILD_OFFSET_NUMBITS, child0, "child0 offset")
        | pack_bits(HIERARCHY_CHILD1_OFFSET_BIT0, HIERARCHY_CHILD_OFFSET_NUMBITS, child1, "child1 offset")
    )


def is_node_word(word: int) -> bool:
    return bool(unpack_bits(HIERARCHY_IS_NODE_BIT, 1, word))


def unpack_node(word: int) -> tuple[SplitAxis, int, int]:
    """Unpack an internal node into (axis, child0 offset, child1 offset)."""
    return (
        SplitAxis(unpack_bits(HIERARCHY_SPLITTING_COORDINATE_BIT, 1, word)),
        unpack_bits(HIERARCHY_CHILD0_OFFSET_BIT0, HIERARCHY_CHILD_OFFSET_NUMBITS, word),
        unpack_bits(HIERARCHY_CHILD1_OFFSET_BIT0, HIERARCHY_CHILD_OFFSET_NUMBITS, word),
    )


def pack_leaf(curve_list_offset: int, curve_list_size: int) -> int:
    """Pack the first word of a leaf."""
    return pack_bits(
        HIERARCHY_LEAF_CURVE_LIST_BIT0,
        HIERARCHY_LEAF_CURVE_LIST_NUMBITS,
        curve_list_offset,
        "curve list offset",
    ) | pack_bits(
        HIERARCHY_LEAF_CURVE_LIST_SIZE_BIT0,
        HIERARCHY_LEAF_CURVE_LIST_SIZE_NUMBITS,
        curve_list_size,
        "curve list size",
    )


def unpack_leaf(word: int) -> tuple[int, int]:
    """Unpack a leaf word into (curve list offset, curve list size)."""
    return (
        unpack_bits(HIERARCHY_LEAF_CURVE_LIST_BIT0, HIERARCHY_LEAF_CURVE_LIST_NUMBITS, word),
        unpack_bits(
            HIERARCHY_LEAF_CURVE_LIST_SIZE_BIT0, HIERARCHY_LEAF_CURVE_LIST_SIZE_NUMBITS, word
        ),
    )


def pack_winding_sample(winding: int, delta: tuple[int, int]) -> int:
    """Pack a leaf's winding sample word."""
    dx, dy = delta
    return (
        pack_bits(WINDING_VALUE_BIT0, WINDING_VALUE_NUMBITS, winding + WINDING_BIAS, "winding")
        | pack_bits(DELTA_X_BIT0, DELTA_NUMBITS, dx, "delta x")
        | pack_bits(DELTA_Y_BIT0, DELTA_NUMBITS, dy, "delta y")
    )


def unpack_winding_sample(word: int) -> tuple[int, tuple[int, int]]:
    """Unpack a winding sample word into (winding, (delta x, delta y))."""
    winding = unpack_bits(WINDING_VALUE_BIT0, WINDING_VALUE_NUMBITS, word) - WINDING_BIAS
    return (
        winding,
        (
            unpack_bits(DELTA_X_BIT0, DELTA_NUMBITS, word),
            unpack_bits(DELTA_Y_BIT0, DELTA_NUMBITS, word),
        ),
    )


def pack_curve_entry(degree: CurveDegree, location: int) -> int:
    """Pack a 16-bit curve entry."""
    return (int(degree) << CURVE_IS_QUADRATIC_BIT) | pack_bits(
        CURVE_LOCATION_BIT0, CURVE_LOCATION_NUMBITS, location, "curve location"
    )


def unpack_curve_entry(entry: int) -> tuple[CurveDegree, int]:
    """Unpack a 16-bit curve entry into (degree, point location)."""
    return (
        CurveDegree(unpack_bits(CURVE_IS_QUADRATIC_BIT, 1, entry)),
        unpack_bits(CURVE_LOCATION_BIT0, CURVE_LOCATION_NUMBITS, entry),
    )


def pack_curve_pair(entry0: int, entry1: int = 0) -> int:
    """Pack two curve entries into one word."""
    return pack_bits(CURVE_ENTRY0_BIT0, CURVE_NUMBITS, entry0, "curve entry") | pack_bits(
        CURVE_ENTRY1_BIT0, CURVE_NUMBITS, entry1, "curve entry"
    )


def unpack_curve_pair(word: int) -> tuple[int, int]:
    return (
        unpack_bits(CURVE_ENTRY0_BIT0, CURVE_NUMBITS, word),
        unpack_bits(CURVE_ENTRY1_BIT0, CURVE_NUMBITS, word),
    )


def pack_point(point: Point) -> int:
    """Pack a glyph-local point into one word."""
    return pack_bits(
        POINT_X_COORDINATE_BIT0, POINT_COORDINATE_NUMBITS, point.x, "point x"
    ) | pack_bits(POINT_Y_COORDINATE_BIT0, POINT_COORDINATE_NUMBITS, point.y, "point y")


def unpack_point(word: int) -> Point:
    return Point(
        unpack_bits(POINT_X_COORDINATE_BIT0, POINT_COORDINATE_NUMBITS, word),
        unpack_bits(POINT_Y_COORDINATE_BIT0, POINT_COORDINATE_NUMBITS, word),
    )


@dataclass
class PackedGlyph:
    """Packed data of one glyph.

    Attributes:
        hierarchy: Node and leaf words (root at offset 0)
        curve_lists: Curve list words
        points: Point words
        width: Glyph width in glyph units
        height: Glyph height in glyph units
    """

    hierarchy: list[int] = field(default_factory=list)
    curve_lists: list[int] = field(default_factory=list)
    points: list[int] = field(default_factory=list)
    width: int = 0
    height: int = 0

    @property
    def words(self) -> list[int]:
        """The whole block, in storage order."""
        return self.hierarchy + self.curve_lists + self.points

    @property
    def size(self) -> int:
        return len(self.hierarchy) + len(self.curve_lists) + len(self.points)

    def to_bytes(self) -> bytes:
        """The whole block as little-endian 32-bit words."""
        words = self.words
        return struct.pack(f"<{len(words)}I", *words)


class Packer:
    """Serializes a Hierarchy into a PackedGlyph.

    Example:
        packed = Packer().pack(hierarchy, width=1200, height=1400)
    """

    def pack(self, hierarchy: Hierarchy, width: int, height: int) -> PackedGlyph:
        """Pack a hierarchy.

        Args:
            hierarchy: Hierarchy arena with glyph-local edges
            width: Glyph width
            height: Glyph height

        Returns:
            PackedGlyph with offsets relative to the start of its block

        Raises:
            PackingError: If any offset, size, winding or coordinate
                overflows its bit field
        """
        records = hierarchy.records

        # Word offset of every record; a leaf takes two words.
        record_offsets: list[int] = []
        hierarchy_size = 0
        for record in records:
            record_offsets.append(hierarchy_size)
            hierarchy_size += 1 if isinstance(record, HierarchyNode) else 2

        # Curve lists follow the hierarchy.
        list_offsets: dict[int, int] = {}
        curve_list_size = 0
        for index, record in enumerate(records):
            if isinstance(record, HierarchyLeaf):
                list_offsets[index] = hierarchy_size + curve_list_size
                curve_list_size += (len(record.curves) + 1) // 2

        # Points follow the curve lists; each referenced curve is written once.
        referenced = sorted({i for leaf in hierarchy.leaves for i in leaf.curves})
        point_base = hierarchy_size + curve_list_size
        curve_locations: dict[int, int] = {}
        point_words: list[int] = []
        for curve_index in referenced:
            curve_locations[curve_index] = point_base + len(point_words)
            point_words.extend(pack_point(p) for p in hierarchy.edges[curve_index].points())

        hierarchy_words: list[int] = []
        curve_list_words: list[int] = []
        for index, record in enumerate(records):
            if isinstance(record, HierarchyNode):
                hierarchy_words.append(
                    pack_node(
                        record.axis,
                        record_offsets[record.child0],
                        record_offsets[record.child1],
                    )
                )
                continue

            hierarchy_words.append(pack_leaf(list_offsets[index], len(record.curves)))
            hierarchy_words.append(pack_winding_sample(record.winding, record.delta))

            entries = [
                pack_curve_entry(hierarchy.edges[i].degree, curve_locations[i])
                for i in record.curves
            ]
            for k in range(0, len(entries), 2):
                curve_list_words.append(pack_curve_pair(*entries[k:k + 2]))

        return PackedGlyph(
            hierarchy=hierarchy_words,
            curve_lists=curve_list_words,
            points=point_words,
            width=width,
            height=height,
        )


@dataclass(frozen=True)
class DecodedCurve:
    """A curve read back from a packed block."""

    degree: CurveDegree
    location: int
    points: tuple[Point, ...]


@dataclass(frozen=True)
class DecodedLeaf:
    """A leaf read back from a packed block.

    Attributes:
        offset: Offset of the leaf word in the block
        box: Leaf box reconstructed by replaying the splits
        curves: Curves of the leaf's curve list
        delta: Quantized sample delta
        winding: Winding number at the sample
    """

    offset: int
    box: Box
    curves: tuple[DecodedCurve, ...]
    delta: tuple[int, int]
    winding: int

    @property
    def sample(self) -> tuple[Fraction, Fraction]:
        return sample_point(self.box, self.delta)


def decode_hierarchy(words: list[int], width: int, height: int) -> list[DecodedLeaf]:
    """Walk a packed block and return its leaves in storage order.

    Args:
        words: The packed block (PackedGlyph.words or a slice of an atlas store)
        width: Glyph width
        height: Glyph height

    Returns:
        Decoded leaves, depth first, child0 before child1
    """
    leaves: list[DecodedLeaf] = []
    stack: list[tuple[int, Box]] = [(0, Box(0, 0, width, height))]
    while stack:
        offset, box = stack.pop()
        word = words[offset]
        if is_node_word(word):
            axis, child0, child1 = unpack_node(word)
            box0, box1 = box.split(axis)
            stack.append((child1, box1))
            stack.append((child0, box0))
            continue

        list_offset, list_size = unpack_leaf(word)
        winding, delta = unpack_winding_sample(words[offset + 1])
        curves: list[DecodedCurve] = []
        for k in range(list_size):
            entry = unpack_curve_pair(words[list_offset + k // 2])[k % 2]
            degree, location = unpack_curve_entry(entry)
            count = 3 if degree == CurveDegree.QUADRATIC else 2
            points = tuple(unpack_point(w) for w in words[location:location + count])
            curves.append(DecodedCurve(degree=degree, location=location, points=points))
        leaves.append(
            DecodedLeaf(
                offset=offset,
                box=box,
                curves=tuple(curves),
                delta=delta,
                winding=winding,
            )
        )
    return leaves
