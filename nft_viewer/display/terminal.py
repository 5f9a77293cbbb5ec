"""Terminal display surface.

Draws a decoded image with rich, two pixels per character cell using the
upper half block glyph: the foreground colour paints the top pixel and the
background colour the bottom one.
"""

from typing import Optional

from PIL import Image
from rich.color import Color
from rich.console import Console
from rich.control import Control
from rich.style import Style
from rich.text import Text

HALF_BLOCK = "▀"


class TerminalSurface:
    """Display surface backed by a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def rows(self, image: Image.Image, width: int, height: int) -> list:
        """Convert an image into one rich Text per character row.

        The image is scaled to fit ``width`` x ``height`` cells while keeping
        its aspect ratio.
        """
        frame = image.convert("RGB")
        frame.thumbnail((width, height * 2))
        if frame.height % 2:
            padded = Image.new("RGB", (frame.width, frame.height + 1))
            padded.paste(frame, (0, 0))
            frame = padded

        pixels = frame.load()
        lines = []
        for top in range(0, frame.height, 2):
            line = Text()
            for column in range(frame.width):
                upper = pixels[column, top]
                lower = pixels[column, top + 1]
                line.append(
                    HALF_BLOCK,
                    style=Style(color=Color.from_rgb(*upper), bgcolor=Color.from_rgb(*lower))
                )
            lines.append(line)
        return lines

    def draw(self, image: Image.Image, x: int, y: int, width: int, height: int) -> None:
        """Draw ``image`` with its top-left corner at cell (x, y)."""
        lines = self.rows(image, width, height)
        for offset, line in enumerate(lines):
            self.console.control(Control.move_to(x, y + offset))
            self.console.print(line, end="", soft_wrap=True)
        self.console.control(Control.move_to(0, y + len(lines)))
        self.console.line()
