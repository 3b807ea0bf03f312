import re

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import QHBoxLayout, QSizePolicy, QVBoxLayout, QWidget

from masonry_flow.utils.flow_log import log_flow
from masonry_flow.utils.settings import load_masonry_config
from masonry_flow.widgets.masonry_lifecycle_service import LayoutController
from masonry_flow.widgets.responsive_host import ResponsiveHost

EM_PIXELS = 16
_GUTTER_PATTERN = re.compile(r'^\s*(-?\d+(?:\.\d+)?)\s*(px|em|rem)?\s*$', re.IGNORECASE)


def gutter_to_pixels(gutter) -> int:
    """Convert a gutter value such as 12, '10px' or '1.5em' to whole pixels."""
    if gutter is None or isinstance(gutter, bool):
        return 0
    if isinstance(gutter, (int, float)):
        return max(0, int(round(gutter)))
    match = _GUTTER_PATTERN.match(str(gutter))
    if not match:
        log_flow("MASONRY", f"Unsupported gutter {gutter!r}, using 0", level="WARNING",
                 throttle_key="gutter_parse", every_s=5.0)
        return 0
    value = float(match.group(1))
    if (match.group(2) or 'px').lower() in {'em', 'rem'}:
        value *= EM_PIXELS
    return max(0, int(round(value)))


class MasonryView(QWidget):
    """Qt host that renders published layouts as equal-width columns of item widgets."""

    width_changed = Signal(int)

    def __init__(self, masonry_config=None, parent=None):
        super().__init__(parent)
        masonry_config = masonry_config or load_masonry_config()
        self._item_widgets = {}
        self._column_containers = []

        self._row = QHBoxLayout(self)
        self._row.setContentsMargins(0, 0, 0, 0)

        self.responsive_host = ResponsiveHost.from_config(masonry_config, self)
        self.controller = LayoutController(
            self._measure_item,
            self.responsive_host.config,
            sequential=masonry_config.sequential,
            retry_interval_ms=masonry_config.retry_interval_ms,
            parent=self,
        )
        self.controller.layout_published.connect(self._apply_layout)
        self.responsive_host.bind_controller(self.controller)
        self.responsive_host.attach(self.width_changed)

    def set_items(self, widgets):
        """Show `widgets` in the masonry; None entries are skipped."""
        new_widgets = [widget for widget in widgets if widget is not None]
        kept = set(map(id, new_widgets))
        for widget in self._item_widgets.values():
            if id(widget) not in kept:
                widget.hide()
                widget.deleteLater()
        # Handles are rebuilt for every item set, never reused across sets.
        self._item_widgets = {}
        for index, widget in enumerate(new_widgets):
            widget.setSizePolicy(QSizePolicy.Policy.Expanding, widget.sizePolicy().verticalPolicy())
            self._item_widgets[index] = widget
        self.controller.set_items(new_widgets)

    def set_breakpoints(self, column_breakpoints=None, gutter_breakpoints=None, **defaults):
        self.responsive_host.set_breakpoints(column_breakpoints, gutter_breakpoints, **defaults)

    def set_sequential(self, sequential: bool):
        self.controller.set_sequential(sequential)

    def shutdown(self):
        self.responsive_host.detach()
        self.controller.shutdown()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.width_changed.emit(event.size().width())

    def _measure_item(self, item):
        widget = self._item_widgets.get(item.index)
        if widget is None or not widget.isVisible():
            return None
        return widget.height()

    def _apply_layout(self, layout):
        gutter = gutter_to_pixels(layout.config.gutter)
        old_containers = self._column_containers
        self._column_containers = []
        self._row.setSpacing(gutter)

        for column in layout.columns:
            container = QWidget(self)
            column_layout = QVBoxLayout(container)
            column_layout.setContentsMargins(0, 0, 0, 0)
            column_layout.setSpacing(gutter)
            for item in column:
                widget = self._item_widgets.get(item.index)
                if widget is not None:
                    # Reparents the widget out of its previous column.
                    column_layout.addWidget(widget)
            column_layout.addStretch(1)
            self._row.addWidget(container, 1)
            self._column_containers.append(container)
            container.show()

        for container in old_containers:
            self._row.removeWidget(container)
            container.deleteLater()

        for widget in self._item_widgets.values():
            widget.show()

        log_flow("MASONRY", f"Rendered {layout.strategy.value} layout: "
                            f"{layout.column_count} columns, gutter={gutter}px",
                 throttle_key="masonry_render", every_s=0.25)
        if not self.controller.distributed:
            # Let the layout pass run before asking for a measurement.
            QTimer.singleShot(0, self.controller.notify_measurement_ready)
