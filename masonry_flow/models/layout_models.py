"""Value types shared by the masonry layout core."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class MasonryItem:
    """An item to place; `index` is its position among the valid entries."""
    index: int
    payload: object = field(default=None, compare=False)


@dataclass(frozen=True)
class MeasuredItem:
    """A MasonryItem paired with the height seen during one measurement pass."""
    item: MasonryItem
    height: float | None = None

    @property
    def is_ready(self) -> bool:
        return is_usable_height(self.height)


@dataclass(frozen=True)
class ResolvedConfig:
    column_count: int
    gutter: object


class LayoutStrategy(str, Enum):
    ROUND_ROBIN = "round_robin"
    BALANCED = "balanced"


class LayoutState(str, Enum):
    UNMEASURED = "unmeasured"
    ROUND_ROBIN_SHOWN = "round_robin_shown"
    SETTLING = "settling"
    BALANCED = "balanced"


@dataclass(frozen=True)
class Layout:
    """A complete column partition, replaced wholesale and never edited."""
    columns: tuple
    config: ResolvedConfig
    strategy: LayoutStrategy
    epoch: int = 0
    column_heights: tuple | None = None

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def items(self) -> list[MasonryItem]:
        """All placed items, column by column."""
        return [item for column in self.columns for item in column]

    def indices(self) -> list[list[int]]:
        return [[item.index for item in column] for column in self.columns]


def is_usable_height(height) -> bool:
    """A height counts only when it is a positive, finite number."""
    if height is None or isinstance(height, bool):
        return False
    try:
        value = float(height)
    except (TypeError, ValueError):
        return False
    # NaN fails both comparisons.
    return 0.0 < value < float('inf')


def wrap_items(entries) -> list[MasonryItem | None]:
    """
    Give each non-None entry a MasonryItem identity.

    None slots are kept as None so placement can skip them without shifting
    the indices of the entries that follow.
    """
    wrapped = []
    valid_index = 0
    for entry in entries:
        if entry is None:
            wrapped.append(None)
            continue
        if isinstance(entry, MasonryItem):
            wrapped.append(MasonryItem(index=valid_index, payload=entry.payload))
        else:
            wrapped.append(MasonryItem(index=valid_index, payload=entry))
        valid_index += 1
    return wrapped
