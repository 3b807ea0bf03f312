from PySide6.QtCore import QObject, QTimer, Signal

from masonry_flow.models.layout_models import LayoutState, ResolvedConfig, wrap_items
from masonry_flow.utils.flow_log import log_flow
from masonry_flow.widgets.masonry_layout import build_balanced_layout, build_round_robin_layout
from masonry_flow.widgets.masonry_measurement_gate import MeasurementGate

DEFAULT_RETRY_INTERVAL_MS = 100


class LayoutController(QObject):
    """
    Owns the masonry lifecycle for one item set and configuration (an epoch).

    Every epoch publishes a round-robin layout right away, then retries the
    height-balanced layout on a single-shot timer until all items measure.
    """

    layout_published = Signal(object)
    state_changed = Signal(str)

    def __init__(self, measure, config: ResolvedConfig | None = None, *, sequential: bool = False,
                 retry_interval_ms: int = DEFAULT_RETRY_INTERVAL_MS, timer=None, parent=None):
        super().__init__(parent)
        self._gate = measure if isinstance(measure, MeasurementGate) else MeasurementGate(measure)
        self._config = config or ResolvedConfig(column_count=3, gutter='10px')
        self._sequential = bool(sequential)
        self._retry_interval_ms = max(1, int(retry_interval_ms))
        self._retry_timer = timer if timer is not None else self._create_retry_timer()
        self._items = []
        self._layout = None
        self._state = LayoutState.UNMEASURED
        self._distributed = False
        self._epoch = 0
        self._pending_epoch = None
        self._retry_count = 0
        self._shut_down = False

    def _create_retry_timer(self):
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(self.retry_tick)
        return timer

    @property
    def layout(self):
        return self._layout

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def state(self) -> LayoutState:
        return self._state

    @property
    def distributed(self) -> bool:
        return self._distributed

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def sequential(self) -> bool:
        return self._sequential

    @property
    def retry_count(self) -> int:
        """Retries spent in the current epoch."""
        return self._retry_count

    def set_items(self, entries):
        """Replace the item sequence; None entries are skipped during placement."""
        self._items = wrap_items(entries)
        self._start_epoch("items changed")

    def set_config(self, config: ResolvedConfig):
        """Apply a resolved configuration; only a real change starts a new epoch."""
        if config == self._config:
            return
        self._config = config
        self._start_epoch(f"config changed -> columns={config.column_count} gutter={config.gutter}")

    def set_sequential(self, sequential: bool):
        sequential = bool(sequential)
        if sequential == self._sequential:
            return
        self._sequential = sequential
        self._start_epoch(f"sequential={sequential}")

    def notify_measurement_ready(self):
        """Push path for hosts that know when layout finished; the timer stays as fallback."""
        if self._state is LayoutState.SETTLING and not self._shut_down:
            self._attempt_balance()

    def retry_tick(self):
        """Timer callback for the settling retry."""
        if self._shut_down or self._state is not LayoutState.SETTLING:
            return
        if self._pending_epoch != self._epoch:
            # Stale tick from a superseded epoch.
            return
        self._pending_epoch = None
        self._retry_count += 1
        log_flow("MASONRY", f"Retry #{self._retry_count} for epoch {self._epoch}",
                 throttle_key="masonry_retry", every_s=1.0)
        self._attempt_balance()

    def shutdown(self):
        """Stop retrying; nothing is published after this."""
        self._shut_down = True
        self._cancel_retry()

    def _start_epoch(self, reason: str):
        if self._shut_down:
            return
        self._cancel_retry()
        self._epoch += 1
        self._retry_count = 0
        log_flow("MASONRY", f"Epoch {self._epoch} start ({reason}); items={self._valid_count()}")

        self._layout = build_round_robin_layout(self._items, self._config, self._epoch)
        self._distributed = self._sequential
        self._set_state(LayoutState.ROUND_ROBIN_SHOWN)
        self.layout_published.emit(self._layout)

        if self._sequential:
            return
        self._attempt_balance()

    def _attempt_balance(self):
        if not self._gate.all_ready(self._items):
            self._schedule_retry()
            return
        measured = self._gate.measure_all(self._items)
        if not all(entry.is_ready for entry in measured):
            # Measurement changed between the gate and the pass.
            self._schedule_retry()
            return

        self._cancel_retry()
        self._layout = build_balanced_layout(measured, self._config, self._epoch)
        self._distributed = True
        self._set_state(LayoutState.BALANCED)
        log_flow("MASONRY", f"Balanced epoch {self._epoch} after {self._retry_count} retries; "
                            f"heights={list(self._layout.column_heights)}", level="INFO")
        self.layout_published.emit(self._layout)

    def _schedule_retry(self):
        self._set_state(LayoutState.SETTLING)
        self._pending_epoch = self._epoch
        self._retry_timer.start(self._retry_interval_ms)

    def _cancel_retry(self):
        self._pending_epoch = None
        self._retry_timer.stop()

    def _set_state(self, state: LayoutState):
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state.value)

    def _valid_count(self) -> int:
        return sum(1 for item in self._items if item is not None)
