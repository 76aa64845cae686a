"""
PNG renderer for laid-out timing diagrams.

Rasterizes a Geometry with Pillow. This sits outside the compile/layout
core: the core only produces geometry, this module is one way to look at it.
"""

import os
from pathlib import Path as FilePath
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .geometry import Geometry, Line, Path, Point, Polygon, Text

Color = Tuple[int, int, int]

# Bezier legs are flattened into this many straight pieces
CURVE_STEPS = 16
DASH_LENGTH = 4


class PNGRenderer:
    """Renders Geometry as PNG images."""

    def __init__(
        self,
        scale: int = 2,  # For high-resolution output
        font_size: int = 11,
        font_path: Optional[str] = None,  # Custom font path
        line_width: int = 1,
    ):
        self.scale = scale
        self.font_size = font_size
        self.font_path = font_path
        self.line_width = line_width

        # Colors
        self.bg_color: Color = (255, 255, 255)
        self.line_color: Color = (0, 0, 0)
        self.text_color: Color = (0, 0, 0)
        self.hatch_color: Color = (200, 200, 200)
        self.data_colors: Dict[str, Color] = {
            "data0": (255, 255, 255),
            "data1": (255, 255, 255),
            "data2": (255, 255, 176),
            "data3": (255, 224, 185),
            "data4": (185, 224, 255),
        }

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for rendering text."""
        if self.font is not None:
            return self.font

        font_size = self.font_size * self.scale

        font_options = []
        if self.font_path:
            font_options.append(self.font_path)
        font_options.extend(
            [
                "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
                "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
                "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
                "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
            ]
        )

        for path in font_options:
            if os.path.exists(path):
                try:
                    self.font = ImageFont.truetype(path, font_size)
                    return self.font
                except OSError:
                    continue

        # Fall back to Pillow's default font
        try:
            self.font = ImageFont.load_default(size=font_size)
        except TypeError:
            # Older Pillow versions don't support size parameter
            self.font = ImageFont.load_default()
        return self.font

    def _xy(self, point: Point) -> Tuple[float, float]:
        return point[0] * self.scale, point[1] * self.scale

    def _fill(self, name: Optional[str]) -> Optional[Color]:
        if name is None:
            return None
        if name == "hatch":
            return self.hatch_color
        if name == "background":
            return self.bg_color
        if name == "stroke":
            return self.line_color
        return self.data_colors.get(name, self.bg_color)

    def render(self, geometry: Geometry) -> Image.Image:
        """
        Render the geometry to an in-memory image.

        Args:
            geometry: Output of the layout engine

        Returns:
            An RGB Pillow image
        """
        size = (
            max(1, int(round(geometry.width * self.scale))),
            max(1, int(round(geometry.height * self.scale))),
        )
        img = Image.new("RGB", size, self.bg_color)
        draw = ImageDraw.Draw(img)
        width = self.line_width * self.scale

        for primitive in geometry.primitives:
            if isinstance(primitive, Polygon):
                self._draw_polygon(draw, primitive, width)
            elif isinstance(primitive, Line):
                self._draw_polyline(draw, primitive.points, primitive.stroke, width)
            elif isinstance(primitive, Path):
                self._draw_polyline(draw, flatten_path(primitive), primitive.stroke, width)
            elif isinstance(primitive, Text):
                self._draw_text(draw, primitive)

        return img

    def save(self, geometry: Geometry, output_path: str = "diagram.png") -> str:
        """
        Render the geometry and save it as a PNG file.

        Args:
            geometry: Output of the layout engine
            output_path: Path to save the PNG file

        Returns:
            Path to the saved PNG file
        """
        self.render(geometry).save(FilePath(output_path), "PNG")
        return output_path

    def _draw_polygon(self, draw: ImageDraw.ImageDraw, polygon: Polygon, width: int):
        points = [self._xy(p) for p in polygon.points]
        draw.polygon(points, fill=self._fill(polygon.fill))
        if polygon.stroke != "none":
            self._draw_polyline(draw, polygon.points + polygon.points[:1], "solid", width)

    def _draw_polyline(
        self, draw: ImageDraw.ImageDraw, points: List[Point], stroke: str, width: int
    ):
        if len(points) < 2 or stroke == "none":
            return
        scaled = [self._xy(p) for p in points]
        if stroke == "solid":
            draw.line(scaled, fill=self.line_color, width=width, joint="curve")
            return
        for a, b in zip(scaled, scaled[1:]):
            self._draw_dashed(draw, a, b, width)

    def _draw_dashed(self, draw: ImageDraw.ImageDraw, a, b, width: int):
        dx, dy = b[0] - a[0], b[1] - a[1]
        length = (dx * dx + dy * dy) ** 0.5
        dash = DASH_LENGTH * self.scale
        if length == 0:
            return
        steps = int(length // dash)
        for i in range(0, steps + 1, 2):
            t0 = i * dash / length
            t1 = min((i + 1) * dash / length, 1.0)
            if t0 >= 1.0:
                break
            draw.line(
                [(a[0] + dx * t0, a[1] + dy * t0), (a[0] + dx * t1, a[1] + dy * t1)],
                fill=self.line_color,
                width=width,
            )

    def _draw_text(self, draw: ImageDraw.ImageDraw, text: Text):
        font = self._get_font()
        bbox = draw.textbbox((0, 0), text.text, font=font)
        text_w, text_h = bbox[2] - bbox[0], bbox[3] - bbox[1]
        x, y = self._xy((text.x, text.y))
        if text.anchor == "middle":
            x -= text_w / 2
        elif text.anchor == "end":
            x -= text_w
        # Vertically center on the anchor point
        y -= text_h / 2 + bbox[1]
        draw.text((x, y), text.text, font=font, fill=self.text_color)


def flatten_path(path: Path, steps: int = CURVE_STEPS) -> List[Point]:
    """Approximate a Path with a polyline."""
    points = [path.start]
    current = path.start
    for command in path.commands:
        if command.op == "C":
            c1, c2, end = command.points
            for i in range(1, steps + 1):
                t = i / steps
                u = 1 - t
                points.append(
                    (
                        u**3 * current[0] + 3 * u * u * t * c1[0]
                        + 3 * u * t * t * c2[0] + t**3 * end[0],
                        u**3 * current[1] + 3 * u * u * t * c1[1]
                        + 3 * u * t * t * c2[1] + t**3 * end[1],
                    )
                )
        else:
            points.extend(command.points)
        current = command.points[-1]
    return points


def render_to_png(geometry: Geometry, output_path: str, **kwargs) -> str:
    """
    Convenience function to render geometry to a PNG file.

    Args:
        geometry: Output of the layout engine
        output_path: Path to save the PNG file
        **kwargs: Additional arguments for PNGRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = PNGRenderer(**kwargs)
    return renderer.save(geometry, output_path)
