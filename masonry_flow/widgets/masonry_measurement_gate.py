from masonry_flow.models.layout_models import MeasuredItem, is_usable_height
from masonry_flow.utils.flow_log import log_flow


class MeasurementGate:
    """Answers whether every tracked item currently reports a usable height."""

    def __init__(self, measure):
        self._measure = measure

    def measure(self, item):
        """Return the item's height, or None when it cannot be measured right now."""
        try:
            height = self._measure(item)
        except Exception as e:
            log_flow("MEASURE", f"Measurement failed for item {item.index}: {e}",
                     level="WARNING", throttle_key="measure_error", every_s=1.0)
            return None
        return height if is_usable_height(height) else None

    def all_ready(self, items) -> bool:
        # Not cached: the host can start answering at any time.
        return all(self.measure(item) is not None for item in items if item is not None)

    def measure_all(self, items) -> list[MeasuredItem]:
        """Take a fresh measurement pass over the valid items."""
        return [MeasuredItem(item=item, height=self.measure(item))
                for item in items if item is not None]
