"""Atlas writer for saving encoded glyph data.

The atlas store is written as raw little-endian 32-bit words; a JSON index
next to it records where each glyph lives and the attribute values needed
to draw it.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from glyphrays import __version__
from glyphrays.atlas import GlyphAtlas
from glyphrays.atlas.store import GlyphAttributeIndex
from glyphrays.exceptions import FontSaveError

if TYPE_CHECKING:
    from glyphrays.core.processor import EncodedGlyph

ATLAS_SUFFIX = ".rays"
INDEX_SUFFIX = ".json"


class AtlasWriter:
    """Writes an atlas store and its glyph index.

    Example:
        writer = AtlasWriter(Path("Roboto-Regular.rays"))
        writer.write(atlas, encoded_glyphs, upm=2048)
    """

    def __init__(self, output_path: Path) -> None:
        """Initialize the atlas writer.

        Args:
            output_path: Path of the word store; the index is written to
                the same path with INDEX_SUFFIX appended
        """
        self._output_path = output_path

    @property
    def output_path(self) -> Path:
        return self._output_path

    @property
    def index_path(self) -> Path:
        return self._output_path.with_name(self._output_path.name + INDEX_SUFFIX)

    def write(self, atlas: GlyphAtlas, glyphs: list["EncodedGlyph"], upm: int) -> None:
        """Write the store and the index.

        Args:
            atlas: Atlas holding the packed glyphs
            glyphs: Glyphs stored in the atlas
            upm: Units per EM of the encoded font

        Raises:
            FontSaveError: If a file cannot be written
        """
        try:
            self._output_path.write_bytes(atlas.to_bytes())
        except OSError as e:
            raise FontSaveError(str(self._output_path), str(e)) from e
        index = {
            "generator": f"glyphrays {__version__}",
            "created": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
            "units_per_em": upm,
            "word_count": atlas.size,
            "attribute_names": [attr.name.lower() for attr in GlyphAttributeIndex],
            "glyphs": [glyph.to_dict() for glyph in glyphs],
        }
        try:
            self.index_path.write_text(json.dumps(index, indent=2), encoding="utf-8")
        except OSError as e:
            raise FontSaveError(str(self.index_path), str(e)) from e

    @staticmethod
    def get_atlas_path(input_path: Path) -> Path:
        """Generate the atlas path for a font.

        Converts: font.ttf -> font.rays
                  Roboto-Regular.otf -> Roboto-Regular.rays

        Args:
            input_path: Font file path

        Returns:
            Path with the atlas suffix in place of the font's extension
        """
        return input_path.with_suffix(ATLAS_SUFFIX)
