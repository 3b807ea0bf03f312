"""Column assignment for masonry (Pinterest-style) layouts."""

from masonry_flow.models.layout_models import (Layout, LayoutStrategy, MeasuredItem,
                                               ResolvedConfig, is_usable_height)


def _column_count(num_columns) -> int:
    # Zero or negative counts collapse to a single column.
    return max(1, int(num_columns))


def _valid(items) -> list:
    return [item for item in items if item is not None]


def assign_round_robin(items, num_columns: int) -> list[list]:
    """
    Deal items across columns in sequence order, ignoring size.

    Args:
        items: Item sequence; None slots are skipped and do not advance the deal.
        num_columns: Number of columns (clamped to at least 1).

    Returns:
        One list per column, in column order.
    """
    num_columns = _column_count(num_columns)
    columns = [[] for _ in range(num_columns)]
    for valid_index, item in enumerate(_valid(items)):
        columns[valid_index % num_columns].append(item)
    return columns


def assign_balanced(items, heights, num_columns: int) -> tuple[list[list], list[float]]:
    """
    Place each item, in sequence order, into the currently shortest column.

    Ties go to the lowest column index. Items are not sorted by size first, so
    equal-height items keep a left-to-right reading order.

    Args:
        items: Item sequence; None slots are skipped.
        heights: One measured height per valid item, in the same order.
        num_columns: Number of columns (clamped to at least 1).

    Returns:
        (columns, column_heights)
    """
    num_columns = _column_count(num_columns)
    valid_items = _valid(items)
    heights = list(heights)
    if len(heights) != len(valid_items):
        raise ValueError(
            f"Expected {len(valid_items)} heights, got {len(heights)}")

    column_heights = [0] * num_columns
    columns = [[] for _ in range(num_columns)]
    for item, height in zip(valid_items, heights):
        if not is_usable_height(height):
            raise ValueError(f"Item {item!r} has no usable height: {height!r}")
        # Find the shortest column
        shortest_col = min(range(num_columns), key=lambda i: column_heights[i])
        columns[shortest_col].append(item)
        column_heights[shortest_col] += height
    return columns, column_heights


def build_round_robin_layout(items, config: ResolvedConfig, epoch: int = 0) -> Layout:
    columns = assign_round_robin(items, config.column_count)
    return Layout(
        columns=tuple(tuple(column) for column in columns),
        config=config,
        strategy=LayoutStrategy.ROUND_ROBIN,
        epoch=epoch,
    )


def build_balanced_layout(measured: list[MeasuredItem], config: ResolvedConfig,
                          epoch: int = 0) -> Layout:
    """Build a height-balanced Layout from one completed measurement pass."""
    columns, column_heights = assign_balanced(
        [entry.item for entry in measured],
        [entry.height for entry in measured],
        config.column_count,
    )
    return Layout(
        columns=tuple(tuple(column) for column in columns),
        config=config,
        strategy=LayoutStrategy.BALANCED,
        epoch=epoch,
        column_heights=tuple(column_heights),
    )
