from masonry_flow.models.layout_models import LayoutState, LayoutStrategy, ResolvedConfig
from masonry_flow.widgets import masonry_lifecycle_service as lifecycle_module
from masonry_flow.widgets.masonry_lifecycle_service import LayoutController


class FakeTimer:
    def __init__(self):
        self.started = []
        self.stop_calls = 0
        self.active = False

    def start(self, delay):
        self.started.append(delay)
        self.active = True

    def stop(self):
        self.stop_calls += 1
        self.active = False

    def isActive(self):
        return self.active


class FakeMeasurer:
    """Heights keyed by payload so tests can flip items between unmeasured and measured."""

    def __init__(self, heights=None):
        self.heights = dict(heights or {})

    def __call__(self, item):
        return self.heights.get(item.payload)


def _make_controller(heights=None, *, columns=2, sequential=False, retry_interval_ms=100):
    measurer = FakeMeasurer(heights)
    timer = FakeTimer()
    controller = LayoutController(
        measurer,
        ResolvedConfig(column_count=columns, gutter="10px"),
        sequential=sequential,
        retry_interval_ms=retry_interval_ms,
        timer=timer,
    )
    published = []
    controller.layout_published.connect(lambda layout: published.append(layout))
    return controller, measurer, timer, published


def _payloads(layout):
    return [[item.payload for item in column] for column in layout.columns]


def test_measured_items_publish_round_robin_then_balanced():
    controller, _, timer, published = _make_controller({"a": 50, "b": 10, "c": 10, "d": 10})

    controller.set_items(["a", "b", "c", "d"])

    assert [layout.strategy for layout in published] == [LayoutStrategy.ROUND_ROBIN,
                                                         LayoutStrategy.BALANCED]
    assert _payloads(published[0]) == [["a", "c"], ["b", "d"]]
    assert _payloads(published[1]) == [["a"], ["b", "c", "d"]]
    assert published[1].column_heights == (50, 30)
    assert controller.state is LayoutState.BALANCED
    assert controller.distributed is True
    assert timer.started == []


def test_unmeasured_items_settle_and_retry_on_interval():
    controller, measurer, timer, published = _make_controller({"a": 10})

    controller.set_items(["a", "b"])

    assert len(published) == 1
    assert published[0].strategy is LayoutStrategy.ROUND_ROBIN
    assert controller.state is LayoutState.SETTLING
    assert controller.distributed is False
    assert timer.started == [100]

    controller.retry_tick()
    assert timer.started == [100, 100]
    assert len(published) == 1

    measurer.heights["b"] = 30
    controller.retry_tick()

    assert len(published) == 2
    assert published[1].strategy is LayoutStrategy.BALANCED
    assert controller.state is LayoutState.BALANCED
    assert controller.retry_count == 2


def test_retry_has_no_ceiling():
    controller, _, timer, published = _make_controller({})
    controller.set_items(["a"])

    for _ in range(50):
        controller.retry_tick()

    assert controller.state is LayoutState.SETTLING
    assert len(timer.started) == 51
    assert len(published) == 1


def test_custom_retry_interval():
    controller, _, timer, _ = _make_controller({}, retry_interval_ms=250)
    controller.set_items(["a"])
    assert timer.started == [250]


def test_new_items_while_settling_cancel_stale_retry():
    controller, measurer, timer, published = _make_controller({})
    controller.set_items(["old1", "old2"])
    stale_epoch = controller.epoch
    stops_before = timer.stop_calls

    controller.set_items(["new1", "new2", "new3"])

    assert timer.stop_calls > stops_before
    assert controller.epoch == stale_epoch + 1
    assert _payloads(published[-1]) == [["new1", "new3"], ["new2"]]

    measurer.heights.update({"old1": 10, "old2": 10, "new1": 10, "new2": 20, "new3": 30})
    controller.retry_tick()

    balanced = [layout for layout in published if layout.strategy is LayoutStrategy.BALANCED]
    assert len(balanced) == 1
    assert balanced[0].epoch == controller.epoch
    assert all(item.payload.startswith("new") for item in balanced[0].items())


def test_tick_from_superseded_epoch_is_ignored():
    controller, measurer, _, published = _make_controller({})
    controller.set_items(["a"])
    # Simulate a tick that was already queued for an earlier epoch.
    controller._pending_epoch = controller.epoch - 1
    measurer.heights["a"] = 10

    controller.retry_tick()

    assert len(published) == 1
    assert controller.state is LayoutState.SETTLING


def test_config_change_starts_new_epoch():
    controller, _, _, published = _make_controller({"a": 10, "b": 10, "c": 10})
    controller.set_items(["a", "b", "c"])
    epoch = controller.epoch

    controller.set_config(ResolvedConfig(column_count=3, gutter="10px"))

    assert controller.epoch == epoch + 1
    assert published[-2].strategy is LayoutStrategy.ROUND_ROBIN
    assert published[-2].config.column_count == 3
    assert _payloads(published[-1]) == [["a"], ["b"], ["c"]]


def test_gutter_only_change_starts_new_epoch():
    controller, _, _, published = _make_controller({"a": 10})
    controller.set_items(["a"])
    count = len(published)

    controller.set_config(ResolvedConfig(column_count=2, gutter="20px"))

    assert len(published) == count + 2
    assert published[-1].config.gutter == "20px"


def test_identical_config_is_ignored():
    controller, _, _, published = _make_controller({"a": 10})
    controller.set_items(["a"])
    epoch = controller.epoch

    controller.set_config(ResolvedConfig(column_count=2, gutter="10px"))

    assert controller.epoch == epoch
    assert len(published) == 2


def test_sequential_mode_only_publishes_round_robin():
    controller, _, timer, published = _make_controller({"a": 50, "b": 10, "c": 10}, sequential=True)

    controller.set_items(["a", "b", "c"])
    controller.set_config(ResolvedConfig(column_count=3, gutter="0"))
    controller.set_items(["c", "b"])
    controller.retry_tick()

    assert published
    assert all(layout.strategy is LayoutStrategy.ROUND_ROBIN for layout in published)
    assert controller.distributed is True
    assert controller.state is LayoutState.ROUND_ROBIN_SHOWN
    assert timer.started == []


def test_leaving_sequential_mode_balances():
    controller, _, _, published = _make_controller({"a": 50, "b": 10, "c": 10}, sequential=True)
    controller.set_items(["a", "b", "c"])

    controller.set_sequential(False)

    assert published[-1].strategy is LayoutStrategy.BALANCED
    assert _payloads(published[-1]) == [["a"], ["b", "c"]]


def test_none_entries_are_skipped():
    controller, _, _, published = _make_controller({"a": 10, "b": 10, "c": 10})
    controller.set_items(["a", None, "b", "c"])

    assert [item.index for item in published[-1].items()] == [0, 2, 1]
    assert _payloads(published[-1]) == [["a", "c"], ["b"]]


def test_empty_item_set_balances_immediately():
    controller, _, timer, published = _make_controller({})
    controller.set_items([])

    assert controller.state is LayoutState.BALANCED
    assert published[-1].columns == ((), ())
    assert timer.started == []


def test_measurement_ready_push_skips_waiting_for_timer():
    controller, measurer, _, published = _make_controller({})
    controller.set_items(["a"])

    measurer.heights["a"] = 12
    controller.notify_measurement_ready()

    assert published[-1].strategy is LayoutStrategy.BALANCED


def test_measurement_ready_push_outside_settling_is_noop():
    controller, _, _, published = _make_controller({"a": 12})
    controller.set_items(["a"])
    count = len(published)

    controller.notify_measurement_ready()

    assert len(published) == count


def test_shutdown_stops_retry_and_publishing():
    controller, measurer, timer, published = _make_controller({})
    controller.set_items(["a"])

    controller.shutdown()
    measurer.heights["a"] = 10
    controller.retry_tick()
    controller.set_items(["b"])

    assert timer.active is False
    assert len(published) == 1


def test_state_changes_are_signalled():
    controller, measurer, _, _ = _make_controller({})
    states = []
    controller.state_changed.connect(lambda state: states.append(state))

    controller.set_items(["a"])
    measurer.heights["a"] = 10
    controller.retry_tick()

    assert states == ["round_robin_shown", "settling", "balanced"]


def test_default_timer_is_single_shot_qtimer():
    controller = LayoutController(lambda item: None)
    timer = controller._retry_timer
    assert isinstance(timer, lifecycle_module.QTimer)
    assert timer.isSingleShot()
    controller.shutdown()
