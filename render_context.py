"""
Per-export rendering state.

A RenderContext is created fresh for every top-level export call. It owns
the svgwrite drawing, the element id counter, the label collision registry,
the raster asset cache and progress output, so independent exports never
share mutable state.
"""

import base64
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Any, Iterable

import svgwrite
from PIL import Image

from collision import CollisionManager


class SeededRandom:
    """Linear congruential generator for reproducible procedural art.

    next() returns floats in [0, 1]. Two generators created with the same
    seed produce the same sequence.
    """

    MULTIPLIER = 1103515245
    INCREMENT = 12345
    MASK = 0x7FFFFFFF

    def __init__(self, seed: int):
        self.state = int(seed) & self.MASK

    @classmethod
    def with_seed(cls, seed: int) -> 'SeededRandom':
        return cls(seed)

    def next(self) -> float:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) & self.MASK
        return self.state / self.MASK

    def uniform(self, low: float, high: float) -> float:
        """Float in [low, high]."""
        return low + self.next() * (high - low)

    def weighted_choice(self, weights: Dict[str, float]) -> str:
        """Pick a key with probability proportional to its weight."""
        total = sum(weights.values())
        pick = self.next() * total
        cumulative = 0.0
        for key, weight in weights.items():
            cumulative += weight
            if pick <= cumulative:
                return key
        return next(reversed(list(weights)))


# === Raster assets ===

@dataclass
class ImageAsset:
    """A raster asset inlined as a data URI.

    Attributes:
        name: File name the asset is referenced by (e.g. "tree1.png")
        data_uri: base64 data URI of the file contents
        width: Pixel width
        height: Pixel height
    """
    name: str
    data_uri: str
    width: int
    height: int

    @property
    def aspect(self) -> float:
        """Width over height."""
        return self.width / self.height if self.height else 1.0


MIME_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png", "GIF": "image/gif", "WEBP": "image/webp"}


def load_image_asset(path) -> ImageAsset:
    """Read a raster file and inline it as a data URI.

    Raises:
        OSError: The file is missing or is not an image Pillow can read
    """
    image_path = Path(path)
    raw = image_path.read_bytes()
    with Image.open(BytesIO(raw)) as img:
        width, height = img.size
        mime = MIME_TYPES.get(img.format or "", "image/png")
    encoded = base64.b64encode(raw).decode('utf-8')
    return ImageAsset(image_path.name, f"data:{mime};base64,{encoded}", width, height)


class ImageCache:
    """Raster assets by file name.

    Missing assets are not an error: href() falls back to the relative file
    name for the consuming environment to resolve.
    """

    def __init__(self, assets: Optional[Iterable[ImageAsset]] = None):
        self.assets: Dict[str, ImageAsset] = {}
        for asset in assets or []:
            self.assets[asset.name] = asset

    @classmethod
    def from_directory(cls, directory, names: Iterable[str], verbose: bool = False) -> 'ImageCache':
        """Load the named assets that exist in a directory."""
        cache = cls()
        directory = Path(directory)
        for name in names:
            path = directory / name
            if not path.exists():
                if verbose:
                    print(f"  Warning: asset {name} not found in {directory}")
                continue
            try:
                cache.add(load_image_asset(path))
            except OSError as e:
                if verbose:
                    print(f"  Warning: cannot read asset {path}: {e}")
                continue
            if verbose:
                print(f"  Loaded asset {name}")
        return cache

    def add(self, asset: ImageAsset):
        self.assets[asset.name] = asset

    def get(self, name: str) -> Optional[ImageAsset]:
        return self.assets.get(name)

    def href(self, name: str) -> str:
        """Data URI when cached, otherwise the relative file name."""
        asset = self.assets.get(name)
        return asset.data_uri if asset else name

    def aspect(self, name: str, default: float = 1.0) -> float:
        asset = self.assets.get(name)
        return asset.aspect if asset else default

    def __contains__(self, name: str) -> bool:
        return name in self.assets

    def __len__(self) -> int:
        return len(self.assets)


# === Context ===

class RenderContext:
    """Mutable state of one export pass.

    Attributes:
        width: Document width in pixels
        height: Document height in pixels
        dwg: svgwrite Drawing the document is built into
        collisions: Registry of placed marker and label boxes
        images: Raster asset cache
        patterns: Pattern ids already defined, keyed by style key
        verbose: Print progress lines
    """

    def __init__(
        self,
        width: float,
        height: float,
        images: Optional[ImageCache] = None,
        verbose: bool = False
    ):
        self.width = width
        self.height = height
        self.dwg = svgwrite.Drawing(
            size=(width, height),
            viewBox=f"0 0 {width} {height}",
            debug=False
        )
        self.collisions = CollisionManager()
        self.images = images if images is not None else ImageCache()
        self.patterns: Dict[str, str] = {}
        self.verbose = verbose
        self._id_counter = 0

    def unique_id(self, base: str) -> str:
        """Next document-unique id for a base name ('grass' -> 'grass_1')."""
        self._id_counter += 1
        return f"{base}_{self._id_counter}"

    def add_def(self, element: Any) -> Any:
        """Add an element to the document <defs>."""
        self.dwg.defs.add(element)
        return element

    def cached_pattern(self, key: str, build) -> str:
        """Define a pattern once per style key and return its id.

        Args:
            key: Style key (terrain type plus colours)
            build: Callable taking this context and returning a pattern element

        Returns:
            The pattern's id
        """
        if key not in self.patterns:
            pattern = build(self)
            self.add_def(pattern)
            self.patterns[key] = pattern['id']
        return self.patterns[key]

    def href(self, asset_name: str) -> str:
        return self.images.href(asset_name)

    def log(self, message: str):
        """Print a progress line when verbose."""
        if self.verbose:
            print(f"  {message}")

    def warn(self, message: str):
        """Print a warning line when verbose."""
        if self.verbose:
            print(f"  Warning: {message}")

    def tostring(self) -> str:
        """Serialize the document."""
        return self.dwg.tostring()


def placeholder_document(width: float, height: float, message: str = "No features to export") -> str:
    """Empty canvas of the requested size carrying a centered message."""
    dwg = svgwrite.Drawing(size=(width, height), debug=False)
    dwg.add(dwg.text(message, insert=("50%", "50%"), text_anchor="middle"))
    return dwg.tostring()
