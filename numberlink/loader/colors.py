"""Named flow colors and their RGB values."""

from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import seaborn as sns

from ..core.exceptions import PuzzleFormatError

DEFAULT_COLORS_PATH = Path(__file__).resolve().parent.parent / "data" / "colors.json"

RGB = Tuple[int, int, int]


class ColorRegistry:
    """
    Maps color names to color indices and RGB triples.

    Indices follow the order of the colors file. Boards only ever store the
    index; names and RGB values are for loading and drawing.
    """

    # Palette for indices past the end of the file
    EXTRA_PALETTE = "husl"
    EXTRA_PALETTE_SIZE = 24

    def __init__(self, colors: Dict[str, RGB]):
        self._names: List[str] = list(colors)
        self._rgb: List[RGB] = [tuple(colors[name]) for name in self._names]
        self._index = {name: i for i, name in enumerate(self._names)}
        self._extra: Optional[List[RGB]] = None

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> ColorRegistry:
        """
        Load colors from a JSON object of ``name: [r, g, b]``.

        Raises:
            PuzzleFormatError: If an entry is not three integers in 0-255.
        """
        with open(path) as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise PuzzleFormatError(f"{path}: expected a JSON object of colors")
        for name, value in data.items():
            if (not isinstance(value, list) or len(value) != 3
                    or not all(isinstance(v, int) and 0 <= v <= 255 for v in value)):
                raise PuzzleFormatError(f"{path}: color {name!r} must be [r, g, b], got {value!r}")
        return cls(data)

    @classmethod
    def default(cls) -> ColorRegistry:
        """The colors shipped with the package."""
        return cls.from_json(DEFAULT_COLORS_PATH)

    def index_of(self, name: str) -> Optional[int]:
        """Index of a named color, or None if the name is unknown."""
        return self._index.get(name)

    def name_of(self, index: int) -> str:
        if 0 <= index < len(self._names):
            return self._names[index]
        return f"extra_{index}"

    def rgb_of(self, index: int) -> RGB:
        """
        RGB triple for a color index.

        Indices beyond the file (archive puzzles can use up to 26 letters)
        get a stable color from a seaborn palette.
        """
        if 0 <= index < len(self._rgb):
            return self._rgb[index]
        if index < 0:
            raise ValueError(f"Color index must be non-negative, got {index}")

        if self._extra is None:
            palette = sns.color_palette(self.EXTRA_PALETTE, self.EXTRA_PALETTE_SIZE)
            self._extra = [tuple(int(round(c * 255)) for c in rgb) for rgb in palette]
        return self._extra[(index - len(self._rgb)) % len(self._extra)]

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        return f"ColorRegistry({len(self)} colors)"
