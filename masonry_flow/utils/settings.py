from dataclasses import dataclass

from PySide6.QtCore import QSettings, Signal

# Defaults for settings that are accessed from multiple places.
DEFAULT_SETTINGS = {
    # Breakpoint tables are stored as 'width:value' pairs, like the preferred sizes list.
    'masonry_column_breakpoints': '350:1, 750:2, 900:3',
    'masonry_gutter_breakpoints': '350:10px, 750:15px, 900:20px',
    'masonry_default_columns': 3,
    'masonry_default_gutter': '10px',
    'masonry_sequential': False,
    'masonry_breakpoint_policy': 'inclusive',  # inclusive (key <= width) or strict (key < width)
    'masonry_retry_interval_ms': 100,
    'minimal_trace_logs': True,
    'demo_item_count': 20,
    'demo_theme': 'pastel',
}


class Settings(QSettings):
    # Signal that shows that the setting with the given string was changes
    change = Signal(str, object, name='settingsChanged')

    def __init__(self):
        super().__init__('masonry_flow', 'masonry_flow')

    def setValue(self, key, value):
        super().setValue(key, value)
        self.change.emit(key, value)

# Common shared instance to ensure the Signal is also shared
settings = Settings()


@dataclass(frozen=True)
class MasonryConfig:
    """Snapshot of the masonry configuration surface."""
    column_breakpoints: dict
    gutter_breakpoints: dict
    default_columns: int
    default_gutter: object
    sequential: bool
    policy: str
    retry_interval_ms: int


def _coerce_value(raw: str):
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        return text


def parse_breakpoints(text) -> dict:
    """
    Parse a 'width:value, width:value' string into a breakpoint table.

    Keys stay as strings here; the resolver owns numeric validation so a bad
    key is rejected in one place. Values that look like integers become ints.
    """
    if isinstance(text, dict):
        return dict(text)
    table = {}
    if not text:
        return table
    for pair in str(text).split(','):
        pair = pair.strip()
        if not pair:
            continue
        key, separator, value = pair.partition(':')
        if not separator:
            raise ValueError(f"Breakpoint entry '{pair}' is missing ':'")
        table[key.strip()] = _coerce_value(value)
    return table


def format_breakpoints(table: dict) -> str:
    return ', '.join(f'{key}:{value}' for key, value in table.items())


def load_masonry_config(source=None) -> MasonryConfig:
    """Read the masonry settings, falling back to DEFAULT_SETTINGS."""
    source = source if source is not None else settings

    def read(key, value_type):
        return source.value(key, defaultValue=DEFAULT_SETTINGS[key], type=value_type)

    policy = str(read('masonry_breakpoint_policy', str)).strip().lower()
    if policy not in {'inclusive', 'strict'}:
        policy = 'inclusive'
    return MasonryConfig(
        column_breakpoints=parse_breakpoints(read('masonry_column_breakpoints', str)),
        gutter_breakpoints=parse_breakpoints(read('masonry_gutter_breakpoints', str)),
        default_columns=int(read('masonry_default_columns', int)),
        default_gutter=_coerce_value(str(read('masonry_default_gutter', str))),
        sequential=bool(read('masonry_sequential', bool)),
        policy=policy,
        retry_interval_ms=max(1, int(read('masonry_retry_interval_ms', int))),
    )
