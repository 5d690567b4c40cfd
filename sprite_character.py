"""Cairo renderer for catalog frames.

Loads one PNG surface per frame reference found under the sprites
directory (``sprites/01_idle/tile000.png`` ...). Frames whose file is
missing are simply not drawn.
"""

from __future__ import annotations

import logging
import os

import cairo

from animator import Catalog

logger = logging.getLogger(__name__)


class SpriteCharacter:
    """Frame surfaces keyed by frame reference. Sprites face right."""

    def __init__(self, sprites_dir: str, catalog: Catalog) -> None:
        self._sprites: dict[str, cairo.ImageSurface] = {}
        for descriptor in catalog.values():
            for ref in descriptor.frames:
                if ref in self._sprites:
                    continue
                path = os.path.join(sprites_dir, ref)
                if not os.path.exists(path):
                    continue
                try:
                    self._sprites[ref] = cairo.ImageSurface.create_from_png(path)
                except (cairo.Error, OSError) as exc:
                    logger.warning("Could not load %s: %s", path, exc)
        logger.debug("Loaded %d sprite frames from %s", len(self._sprites), sprites_dir)

    def __len__(self) -> int:
        return len(self._sprites)

    def draw(self, ctx: cairo.Context, width: int, height: int,
             frame_ref: str, facing_right: bool, squash: float = 1.0) -> None:
        surface = self._sprites.get(frame_ref)
        if surface is None:
            return

        sprite_w = surface.get_width()
        sprite_h = surface.get_height()

        ctx.save()

        # Squash toward the bottom edge for the bounce cue
        ctx.translate(0, height * (1.0 - squash))
        sx = width / sprite_w
        sy = height / sprite_h * squash

        if facing_right:
            ctx.scale(sx, sy)
        else:
            ctx.translate(width, 0)
            ctx.scale(-sx, sy)

        ctx.set_source_surface(surface, 0, 0)
        ctx.get_source().set_filter(cairo.FILTER_NEAREST)
        ctx.paint()
        ctx.restore()
