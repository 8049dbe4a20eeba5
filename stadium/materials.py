from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

# Define a type hint for colors (e.g., RGBA)
ColorTuple = Tuple[int, int, int, int]

# Fixed palette for elements without a color parameter
PITCH_COLOR: ColorTuple = (0, 128, 0, 255)
OUTFIELD_COLOR: ColorTuple = (46, 139, 58, 255)
CRICKET_STRIP_COLOR: ColorTuple = (196, 176, 120, 255)
LINE_COLOR: ColorTuple = (255, 255, 255, 255)
GOAL_COLOR: ColorTuple = (204, 204, 204, 255)
STUMP_COLOR: ColorTuple = (235, 225, 200, 255)
LAMP_COLOR: ColorTuple = (34, 34, 34, 255)


def hex_to_rgba(value: str, alpha: int = 255) -> ColorTuple:
    """
    Converts a '#rrggbb' (or '#rgb') color string into an RGBA tuple.

    Raises:
        ValueError: If the string is not a valid hex color.
    """
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {value!r}")
    try:
        r, g, b = (int(text[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"Invalid hex color: {value!r}") from None
    return (r, g, b, int(alpha))


@dataclass(frozen=True)
class Appearance:
    """
    Renderer-independent description of how a surface looks.

    Instances are hashable so they can key a material cache directly.
    """
    color: ColorTuple
    opacity: float = 1.0
    roughness: float = 0.8
    metalness: float = 0.2
    emissive_intensity: float = 0.0
    texture: Optional[str] = None
    texture_repeat: Tuple[float, float] = (1.0, 1.0)
    double_sided: bool = False

    @property
    def transparent(self) -> bool:
        return self.opacity < 1.0

    def rgba(self) -> ColorTuple:
        """Color with opacity folded into the alpha channel."""
        alpha = int(round(255 * max(0.0, min(1.0, self.opacity))))
        return (self.color[0], self.color[1], self.color[2], alpha)


def solid(color, **kwargs) -> Appearance:
    """Builds an Appearance from either a hex string or an RGBA tuple."""
    if isinstance(color, str):
        color = hex_to_rgba(color)
    return Appearance(color=tuple(int(c) for c in color), **kwargs)


def with_texture_repeat(base: Appearance, repeat: Tuple[float, float]) -> Appearance:
    """
    Derives a per-instance appearance that differs from `base` only by its
    texture repeat. Pure: `base` is left untouched.
    """
    return replace(base, texture_repeat=(float(repeat[0]), float(repeat[1])))


def hoarding_texture_repeat(width: float, height: float, image_aspect_ratio: float) -> Tuple[float, float]:
    """
    Horizontal/vertical repeat so a banner image keeps its proportions on a
    hoarding of the given size.
    """
    if width <= 0 or height <= 0 or image_aspect_ratio <= 0:
        raise ValueError("Hoarding width, height and image aspect ratio must be positive")
    return (width / (height * image_aspect_ratio), 1.0)


class MaterialCache:
    """
    Explicit material cache keyed by an Appearance.

    The cache is owned by the rendering side. Each rebuild pass calls
    `begin_pass()`, fetches materials with `get()`, then `sweep()` releases
    every entry the pass did not touch, so the cache size tracks the current
    scene rather than the edit history.
    """

    def __init__(self):
        self._entries: Dict[Appearance, int] = {}
        self._used: set = set()
        self._next_id = 0
        self.created = 0
        self.released = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, appearance: Appearance) -> bool:
        return appearance in self._entries

    def get(self, appearance: Appearance) -> int:
        """Returns the material id for `appearance`, creating it on first use."""
        material_id = self._entries.get(appearance)
        if material_id is None:
            material_id = self._next_id
            self._next_id += 1
            self._entries[appearance] = material_id
            self.created += 1
        self._used.add(appearance)
        return material_id

    @property
    def texture_count(self) -> int:
        return sum(1 for appearance in self._entries if appearance.texture is not None)

    def begin_pass(self):
        self._used = set()

    def invalidate(self, appearance: Appearance) -> bool:
        """Drops a single entry. Returns True if it existed."""
        if appearance in self._entries:
            del self._entries[appearance]
            self._used.discard(appearance)
            self.released += 1
            return True
        return False

    def sweep(self) -> int:
        """Releases entries not used since `begin_pass()`. Returns how many were dropped."""
        stale = [appearance for appearance in self._entries if appearance not in self._used]
        for appearance in stale:
            self.invalidate(appearance)
        return len(stale)

    def clear(self):
        for appearance in list(self._entries):
            self.invalidate(appearance)
        self._used = set()
