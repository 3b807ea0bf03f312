from dataclasses import replace

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (QApplication, QCheckBox, QComboBox, QFormLayout,
                               QHBoxLayout, QLabel, QMainWindow, QPushButton,
                               QScrollArea, QSlider, QVBoxLayout, QWidget)

from masonry_flow.utils.flow_log import log_flow
from masonry_flow.utils.settings import (DEFAULT_SETTINGS, format_breakpoints,
                                         load_masonry_config, settings)
from masonry_flow.widgets.demo_items import (THEMES, create_item_widget,
                                             demo_column_breakpoints, generate_items)
from masonry_flow.widgets.masonry_view import MasonryView

SEQUENTIAL_DESCRIPTION = ' - Items are arranged sequentially from left to right'
BALANCED_DESCRIPTION = ' - Items are arranged to balance column heights'


def column_choice_settings(columns: int) -> dict:
    """Settings saved when the column slider moves, so the next launch starts there."""
    return {
        'masonry_default_columns': columns,
        'masonry_column_breakpoints': format_breakpoints(demo_column_breakpoints(columns)),
    }


def _slider(minimum: int, maximum: int, value: int) -> QSlider:
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setRange(minimum, maximum)
    slider.setValue(value)
    return slider


class MainWindow(QMainWindow):
    def __init__(self, app: QApplication):
        super().__init__()
        self.app = app
        self.setWindowTitle('Masonry Flow Demo')
        self.resize(1100, 800)

        masonry_config = load_masonry_config()
        self.columns = max(1, min(6, masonry_config.default_columns))
        self.gutter = 16
        self.item_count = settings.value(
            'demo_item_count', defaultValue=DEFAULT_SETTINGS['demo_item_count'], type=int)
        self.item_count = max(5, min(50, self.item_count))
        self.theme = settings.value(
            'demo_theme', defaultValue=DEFAULT_SETTINGS['demo_theme'], type=str)
        if self.theme not in THEMES:
            self.theme = THEMES[0]

        # The demo derives its column tiers from the chosen count and uses a flat gutter.
        self.masonry_view = MasonryView(replace(
            masonry_config,
            column_breakpoints=demo_column_breakpoints(self.columns),
            gutter_breakpoints={},
            default_gutter=f'{self.gutter}px',
        ))
        self.mode_label = QLabel()
        self.setCentralWidget(self.create_central_widget(masonry_config.sequential))
        self.update_mode_label()
        self.regenerate_items()

    def create_central_widget(self, sequential: bool) -> QWidget:
        self.columns_slider = _slider(1, 6, self.columns)
        self.columns_label = QLabel()
        self.columns_slider.valueChanged.connect(self.set_columns)
        self.gutter_slider = _slider(0, 40, self.gutter)
        self.gutter_label = QLabel()
        self.gutter_slider.valueChanged.connect(self.set_gutter)
        self.item_count_slider = _slider(5, 50, self.item_count)
        self.item_count_label = QLabel()
        self.item_count_slider.valueChanged.connect(self.set_item_count)

        self.sequential_check_box = QCheckBox('Sequential Layout')
        self.sequential_check_box.setChecked(sequential)
        self.sequential_check_box.toggled.connect(self.set_sequential)
        self.theme_combo_box = QComboBox()
        self.theme_combo_box.addItems([theme.capitalize() for theme in THEMES])
        self.theme_combo_box.setCurrentIndex(THEMES.index(self.theme))
        self.theme_combo_box.currentIndexChanged.connect(self.set_theme)
        regenerate_button = QPushButton('Regenerate Items')
        regenerate_button.clicked.connect(self.regenerate_items)

        slider_form = QFormLayout()
        slider_form.addRow(self.columns_label, self.columns_slider)
        slider_form.addRow(self.gutter_label, self.gutter_slider)
        slider_form.addRow(self.item_count_label, self.item_count_slider)
        option_row = QHBoxLayout()
        option_row.addWidget(self.sequential_check_box)
        option_row.addWidget(QLabel('Color Theme:'))
        option_row.addWidget(self.theme_combo_box)
        option_row.addWidget(regenerate_button)
        option_row.addStretch(1)
        self.update_slider_labels()

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setWidget(self.masonry_view)

        central_widget = QWidget()
        layout = QVBoxLayout(central_widget)
        layout.addLayout(slider_form)
        layout.addLayout(option_row)
        layout.addWidget(self.mode_label)
        layout.addWidget(scroll_area, 1)
        return central_widget

    def update_slider_labels(self):
        self.columns_label.setText(f'Columns: {self.columns}')
        self.gutter_label.setText(f'Gutter: {self.gutter}px')
        self.item_count_label.setText(f'Item Count: {self.item_count}')

    def update_mode_label(self):
        if self.masonry_view.controller.sequential:
            self.mode_label.setText(f'Layout Mode: <b>Sequential</b>{SEQUENTIAL_DESCRIPTION}')
        else:
            self.mode_label.setText(f'Layout Mode: <b>Height-Optimized</b>{BALANCED_DESCRIPTION}')

    @Slot(int)
    def set_columns(self, columns: int):
        self.columns = columns
        self.update_slider_labels()
        for key, value in column_choice_settings(columns).items():
            settings.setValue(key, value)
        self.masonry_view.set_breakpoints(demo_column_breakpoints(columns), default_columns=columns)

    @Slot(int)
    def set_gutter(self, gutter: int):
        self.gutter = gutter
        self.update_slider_labels()
        self.masonry_view.set_breakpoints(default_gutter=f'{gutter}px')

    @Slot(int)
    def set_item_count(self, item_count: int):
        self.item_count = item_count
        self.update_slider_labels()
        settings.setValue('demo_item_count', item_count)
        self.regenerate_items()

    @Slot(bool)
    def set_sequential(self, sequential: bool):
        settings.setValue('masonry_sequential', sequential)
        self.masonry_view.set_sequential(sequential)
        self.update_mode_label()

    @Slot(int)
    def set_theme(self, index: int):
        self.theme = THEMES[index]
        settings.setValue('demo_theme', self.theme)
        self.regenerate_items()

    @Slot()
    def regenerate_items(self):
        items = generate_items(self.item_count, self.theme)
        log_flow('DEMO', f'Generated {len(items)} {self.theme} items')
        self.masonry_view.set_items([create_item_widget(item) for item in items])

    def closeEvent(self, event: QCloseEvent):
        """Stop layout retries before the view goes away."""
        self.masonry_view.shutdown()
        super().closeEvent(event)
