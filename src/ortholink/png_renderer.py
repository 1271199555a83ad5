"""
PNG Renderer module for table layouts.

Draws a laid-out diagram with Pillow: table bodies, node rows, routed links
and, optionally, the visibility graph the links were routed on. Meant for
eyeballing layouts and debugging routes rather than for publication.
"""

from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .layout import TableLayoutResult

Color = Tuple[int, int, int]


class LayoutPNGRenderer:
    """Renders table layouts as PNG images."""

    def __init__(
        self,
        scale: int = 4,
        margin: int = 10,
        show_graph: bool = False,
        show_labels: bool = True,
        line_width: int = 2,
    ):
        """
        Initialize the renderer.

        Args:
            scale: Pixels per layout unit
            margin: Blank border around the layout area, in pixels
            show_graph: Draw the visibility graph segments and nodes
            show_labels: Write node ids inside their rows
            line_width: Width of link lines, in pixels
        """
        self.scale = scale
        self.margin = margin
        self.show_graph = show_graph
        self.show_labels = show_labels
        self.line_width = line_width

        # Colors
        self.bg_color: Color = (255, 255, 255)
        self.area_outline: Color = (220, 220, 220)
        self.inflated_outline: Color = (200, 200, 255)
        self.table_fill: Color = (245, 245, 245)
        self.table_outline: Color = (0, 0, 0)
        self.text_color: Color = (0, 0, 0)
        self.link_color: Color = (200, 40, 40)
        self.fallback_color: Color = (160, 160, 160)
        self.segment_color: Color = (180, 220, 180)
        self.poi_color: Color = (0, 120, 0)
        self.ovg_color: Color = (0, 0, 200)

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        if self.font is None:
            self.font = ImageFont.load_default()
        return self.font

    def _to_px(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale + self.margin, y * self.scale + self.margin

    def _draw_segments(
        self,
        draw: ImageDraw.ImageDraw,
        segments: Iterable[Tuple[Tuple[float, float], Tuple[float, float]]],
    ) -> None:
        for a, b in segments:
            draw.line([self._to_px(*a), self._to_px(*b)], fill=self.segment_color)

    def _draw_dots(
        self, draw: ImageDraw.ImageDraw, points: Iterable[Tuple[float, float]], color: Color
    ) -> None:
        r = max(1, self.scale // 2)
        for x, y in points:
            px, py = self._to_px(x, y)
            draw.ellipse([px - r, py - r, px + r, py + r], fill=color)

    def render_image(self, result: TableLayoutResult) -> Image.Image:
        """Draw the layout and return the image."""
        area = result.area
        width = int(area.width * self.scale + self.margin * 2)
        height = int(area.height * self.scale + self.margin * 2)
        img = Image.new("RGB", (max(width, 1), max(height, 1)), self.bg_color)
        draw = ImageDraw.Draw(img)

        draw.rectangle(
            [self._to_px(area.x, area.y), self._to_px(area.x2, area.y2)],
            outline=self.area_outline,
        )

        if self.show_graph:
            self._draw_segments(draw, result.h)
            self._draw_segments(draw, result.v)

        font = self._get_font()
        for table in result.tables:
            if table.inflated_rect is not None:
                r = table.inflated_rect
                draw.rectangle(
                    [self._to_px(r.x, r.y), self._to_px(r.x2, r.y2)],
                    outline=self.inflated_outline,
                )
            rect = table.rect
            draw.rectangle(
                [self._to_px(rect.x, rect.y), self._to_px(rect.x2, rect.y2)],
                fill=self.table_fill,
                outline=self.table_outline,
            )
            for node in table.children:
                top = self._to_px(node.x, node.y)
                draw.line(
                    [top, (top[0] + rect.width * self.scale, top[1])],
                    fill=self.table_outline,
                )
                if self.show_labels:
                    draw.text(
                        (top[0] + 2, top[1] + 1),
                        str(node.id),
                        fill=self.text_color,
                        font=font,
                    )

        for link in result.links:
            if len(link.points) < 2:
                continue
            color = self.link_color if link.routed else self.fallback_color
            draw.line(
                [self._to_px(x, y) for x, y in link.points],
                fill=color,
                width=self.line_width,
            )

        if self.show_graph:
            self._draw_dots(draw, result.poi, self.poi_color)
            self._draw_dots(draw, result.ovg, self.ovg_color)

        return img

    def render(
        self,
        result: TableLayoutResult,
        output_path: str = "layout.png",
        show_graph: Optional[bool] = None,
    ) -> str:
        """
        Render the layout as a PNG image.

        Args:
            result: Output of ``TableLayout.layout``
            output_path: Path to save the PNG file
            show_graph: Override the renderer's ``show_graph`` setting

        Returns:
            Path to the saved PNG file
        """
        previous = self.show_graph
        if show_graph is not None:
            self.show_graph = show_graph
        try:
            img = self.render_image(result)
        finally:
            self.show_graph = previous
        img.save(output_path, "PNG")
        return output_path


def render_to_png(
    result: TableLayoutResult, output_path: str = "layout.png", **kwargs
) -> str:
    """
    Convenience function to render a table layout to PNG.

    Args:
        result: Output of ``TableLayout.layout``
        output_path: Path to save the PNG file
        **kwargs: Additional arguments passed to LayoutPNGRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = LayoutPNGRenderer(**kwargs)
    return renderer.render(result, output_path)
