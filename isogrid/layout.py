"""
Isometric tile geometry: maps (row, column) indices to pixel positions and
tile footprint polygons in map space.
"""

from __future__ import annotations
import math
from typing import List, Tuple

from pygame.math import Vector2

from .config import ISO_ANGLE, TILE_HEIGHT


class IsoLayout:
    """
    Pixel layout of an isometric map.
    Attributes:
        tile_half_height: Half of the tile height in pixels.
        tile_half_width: Half of the tile width, derived from the iso angle.
    """

    def __init__(
        self, tile_height: float = TILE_HEIGHT, iso_angle: float = ISO_ANGLE
    ) -> None:
        self.tile_half_height = tile_height / 2
        self.tile_half_width = self.tile_half_height * math.tan(
            math.radians(90 - iso_angle)
        )

    def tile_pos_x(self, r: int, c: int) -> float:
        return c * self.tile_half_width + r * self.tile_half_width

    def tile_pos_y(self, r: int, c: int) -> float:
        return r * self.tile_half_height - c * self.tile_half_height

    def tile_position(self, r: int, c: int) -> Vector2:
        """Center of the tile at (r, c)."""
        return Vector2(self.tile_pos_x(r, c), self.tile_pos_y(r, c))

    def object_anchor(self, r: int, c: int) -> Vector2:
        """Position a map-object standing on tile (r, c) is drawn at."""
        return Vector2(
            self.tile_pos_x(r, c), self.tile_pos_y(r, c) + self.tile_half_height
        )

    def tile_vertices(self, r: int, c: int) -> List[Tuple[float, float]]:
        """Diamond footprint of the tile at (r, c)."""
        x = self.tile_pos_x(r, c)
        y = self.tile_pos_y(r, c)
        hw, hh = self.tile_half_width, self.tile_half_height
        return [(x - hw, y), (x, y - hh), (x + hw, y), (x, y + hh)]
