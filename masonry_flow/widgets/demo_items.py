import random
from dataclasses import dataclass

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QLabel

THEMES = ('pastel', 'vibrant', 'monochrome', 'blues')
MIN_ITEM_HEIGHT = 100
MAX_ITEM_HEIGHT = 249


@dataclass(frozen=True)
class DemoItem:
    id: int
    height: int
    color: str


def _hsl(hue: float, saturation: float, lightness: float) -> str:
    """Return a hex color for hue in degrees and saturation/lightness in percent."""
    color = QColor.fromHslF((hue % 360) / 360.0, saturation / 100.0, lightness / 100.0)
    return color.name()


def theme_color(theme: str, rng: random.Random) -> str:
    if theme == 'vibrant':
        return _hsl(rng.random() * 360, 90, 65)
    if theme == 'monochrome':
        return _hsl(0, 0, rng.randint(20, 79))
    if theme == 'blues':
        return _hsl(210, rng.randint(60, 99), rng.randint(40, 69))
    # Pastel, and anything unknown.
    return _hsl(rng.random() * 360, 70, 80)


def generate_items(count: int, theme: str = 'pastel', rng: random.Random | None = None) -> list[DemoItem]:
    """Generate `count` randomly sized, colored demo tiles numbered from 1."""
    rng = rng or random.Random()
    return [
        DemoItem(id=i + 1, height=rng.randint(MIN_ITEM_HEIGHT, MAX_ITEM_HEIGHT),
                 color=theme_color(theme, rng))
        for i in range(max(0, count))
    ]


def demo_column_breakpoints(columns: int) -> dict:
    """Column tiers that shrink the chosen column count on narrow widths."""
    return {
        480: max(1, columns - 2),
        768: max(2, columns - 1),
        1200: columns,
    }


def create_item_widget(item: DemoItem, parent=None) -> QLabel:
    label = QLabel(str(item.id), parent)
    label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    label.setFixedHeight(item.height)
    label.setStyleSheet(
        f'background-color: {item.color}; border-radius: 6px; '
        f'font-weight: bold; font-size: 18px; color: rgba(0, 0, 0, 160);')
    return label
