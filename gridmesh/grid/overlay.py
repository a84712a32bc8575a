"""
Grid overlay rendering for debugging and previews.
"""

import io
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw

from gridmesh.config.settings import get_settings
from gridmesh.grid.models import Grid, PrimaryLine
from gridmesh.monitoring.logger import get_logger

Color = Tuple[int, int, int, int]

LINE_COLOR: Color = (255, 255, 0, 160)
HANDLE_COLOR: Color = (255, 255, 0, 255)
HIGHLIGHT_COLOR: Color = (0, 255, 0, 255)


class GridOverlayRenderer:
    """Draws a grid's lines and handles on top of an image."""

    def __init__(self, handle_radius: Optional[int] = None) -> None:
        """
        Initialize the renderer.

        Args:
            handle_radius: Radius of common-point handles, defaults to config
        """
        settings = get_settings()
        self.handle_radius = handle_radius if handle_radius is not None else settings.grid_handle_radius
        self.logger = get_logger("grid.overlay")

    def create_overlay_image(self, grid: Grid, image_bytes: bytes) -> bytes:
        """
        Draw ``grid`` over an image.

        Segments follow each point's adjacency. Common points get full-size
        handles, refinement points smaller ones. Lines in an active drag use
        the highlight colour.

        Args:
            grid: Grid to draw
            image_bytes: Original image bytes

        Returns:
            Image with the grid overlay as PNG bytes
        """
        img = Image.open(io.BytesIO(image_bytes)).convert("RGBA")
        draw = ImageDraw.Draw(img, "RGBA")

        segments = 0
        for line in grid.lines:
            if not line.visible:
                continue
            color = self._line_color(line)
            for point in line.points:
                for neighbour in point.adjacency:
                    draw.line(
                        [(point.x, point.y), (neighbour.x, neighbour.y)],
                        fill=color,
                        width=1,
                    )
                    segments += 1

        refinement_radius = max(self.handle_radius - 2, 1)
        for line in grid.lines:
            if not line.visible:
                continue
            color = HIGHLIGHT_COLOR if line.highlight else HANDLE_COLOR
            for point in line.points:
                radius = self.handle_radius if point.is_common_point else refinement_radius
                draw.ellipse(
                    [point.x - radius, point.y - radius, point.x + radius, point.y + radius],
                    outline=color,
                    width=1,
                )

        self.logger.debug(
            "Grid overlay rendered",
            extra={"size": f"{img.width}x{img.height}", "segments": segments},
        )

        output = io.BytesIO()
        img.save(output, format="PNG")
        return output.getvalue()

    @staticmethod
    def _line_color(line: PrimaryLine) -> Color:
        if line.active:
            return HIGHLIGHT_COLOR
        if line.color:
            red, green, blue = ImageColor.getrgb(line.color)[:3]
            return red, green, blue, 255
        return LINE_COLOR
