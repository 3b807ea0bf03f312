from PySide6.QtCore import QObject, Signal

from masonry_flow.models.layout_models import ResolvedConfig
from masonry_flow.utils.breakpoints import (BreakpointPolicy, clamp_column_count,
                                            normalize_breakpoints, resolve_config)
from masonry_flow.utils.flow_log import log_flow


class ResponsiveHost(QObject):
    """Turns width notifications into ResolvedConfig changes for a LayoutController."""

    config_changed = Signal(object)

    def __init__(self, column_breakpoints=None, gutter_breakpoints=None, *, default_columns: int = 3,
                 default_gutter='10px', policy=BreakpointPolicy.INCLUSIVE, parent=None):
        super().__init__(parent)
        self._width = None
        self._width_signal = None
        self._controller = None
        self._apply_breakpoints(column_breakpoints, gutter_breakpoints, default_columns,
                                default_gutter, policy)
        self._config = self._resolve()

    @classmethod
    def from_config(cls, masonry_config, parent=None) -> "ResponsiveHost":
        """Build a host from a MasonryConfig settings snapshot."""
        return cls(
            masonry_config.column_breakpoints,
            masonry_config.gutter_breakpoints,
            default_columns=masonry_config.default_columns,
            default_gutter=masonry_config.default_gutter,
            policy=masonry_config.policy,
            parent=parent,
        )

    @property
    def width(self):
        return self._width

    @property
    def has_width(self) -> bool:
        """False until the first width sample arrives; 0 is a real sample."""
        return self._width is not None

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def policy(self) -> BreakpointPolicy:
        return self._policy

    def bind_controller(self, controller):
        """Forward config changes to `controller` and sync it to the current config."""
        self._controller = controller
        if controller is not None:
            controller.set_config(self._config)

    def attach(self, width_signal):
        """Subscribe to a `Signal(int)` that reports viewport width changes."""
        self.detach()
        width_signal.connect(self.on_width_changed)
        self._width_signal = width_signal
        return self

    def detach(self):
        if self._width_signal is None:
            return
        try:
            self._width_signal.disconnect(self.on_width_changed)
        except (RuntimeError, TypeError) as e:
            # The emitter may already be destroyed.
            log_flow("RESPONSIVE", f"Width signal disconnect failed: {e}", level="WARNING")
        self._width_signal = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.detach()
        return False

    def on_width_changed(self, width):
        if width is None:
            return
        self._width = max(0, width)
        self._update_config(f"width={self._width}")

    def set_breakpoints(self, column_breakpoints=None, gutter_breakpoints=None, *,
                        default_columns=None, default_gutter=None, policy=None):
        """Replace tables or defaults and re-resolve against the last width sample."""
        self._apply_breakpoints(
            self._column_breakpoints if column_breakpoints is None else column_breakpoints,
            self._gutter_breakpoints if gutter_breakpoints is None else gutter_breakpoints,
            self._default_columns if default_columns is None else default_columns,
            self._default_gutter if default_gutter is None else default_gutter,
            self._policy if policy is None else policy,
        )
        self._update_config("breakpoints changed")

    def _apply_breakpoints(self, column_breakpoints, gutter_breakpoints, default_columns,
                           default_gutter, policy):
        column_breakpoints = dict(column_breakpoints or {})
        gutter_breakpoints = dict(gutter_breakpoints or {})
        # Validate everything before assigning anything.
        normalize_breakpoints(column_breakpoints)
        normalize_breakpoints(gutter_breakpoints)
        default_columns = clamp_column_count(default_columns)
        policy = BreakpointPolicy.coerce(policy)

        self._column_breakpoints = column_breakpoints
        self._gutter_breakpoints = gutter_breakpoints
        self._default_columns = default_columns
        self._default_gutter = default_gutter
        self._policy = policy

    def _resolve(self) -> ResolvedConfig:
        return resolve_config(self._column_breakpoints, self._gutter_breakpoints, self._width,
                              self._default_columns, self._default_gutter, self._policy)

    def _update_config(self, reason: str):
        config = self._resolve()
        if config == self._config:
            return
        log_flow("RESPONSIVE", f"Config {self._config} -> {config} ({reason})")
        self._config = config
        self.config_changed.emit(config)
        if self._controller is not None:
            self._controller.set_config(config)
