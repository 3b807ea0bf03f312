import random

import pytest

from masonry_flow.widgets.demo_items import (MAX_ITEM_HEIGHT, MIN_ITEM_HEIGHT, THEMES,
                                             create_item_widget, demo_column_breakpoints,
                                             generate_items)


@pytest.mark.parametrize("theme", THEMES + ("unknown",))
def test_generate_items_ids_heights_and_colors(theme):
    items = generate_items(20, theme, random.Random(7))

    assert [item.id for item in items] == list(range(1, 21))
    assert all(MIN_ITEM_HEIGHT <= item.height <= MAX_ITEM_HEIGHT for item in items)
    assert all(item.color.startswith("#") and len(item.color) == 7 for item in items)


def test_generate_items_is_reproducible_with_seed():
    assert generate_items(5, "vibrant", random.Random(3)) == generate_items(5, "vibrant", random.Random(3))


def test_generate_items_negative_count():
    assert generate_items(-1) == []


def test_monochrome_items_are_grey():
    for item in generate_items(10, "monochrome", random.Random(1)):
        red, green, blue = item.color[1:3], item.color[3:5], item.color[5:7]
        assert red == green == blue


def test_demo_column_breakpoints():
    assert demo_column_breakpoints(3) == {480: 1, 768: 2, 1200: 3}
    assert demo_column_breakpoints(1) == {480: 1, 768: 2, 1200: 1}
    assert demo_column_breakpoints(6) == {480: 4, 768: 5, 1200: 6}


def test_create_item_widget_fixed_height():
    items = generate_items(1, "blues", random.Random(2))
    label = create_item_widget(items[0])

    assert label.text() == "1"
    assert label.minimumHeight() == label.maximumHeight() == items[0].height
