import logging
import os
import signal
import sys
import threading
import traceback
import warnings
from datetime import datetime

from PySide6.QtWidgets import QApplication, QMessageBox

from masonry_flow.utils.settings import settings
from masonry_flow.widgets.main_window import MainWindow

CRASH_LOG_PATH = os.path.abspath('masonry_flow_crash.log')
_crash_handlers_installed = False


def _append_crash_log(title: str, exc_info=None):
    """Append a timestamped crash entry to the crash log."""
    ts = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    try:
        with open(CRASH_LOG_PATH, 'a', encoding='utf-8') as f:
            f.write("\n" + "=" * 80 + "\n")
            f.write(f"{ts} | {title}\n")
            f.write("=" * 80 + "\n")
            if exc_info is None:
                f.write(traceback.format_exc())
            else:
                f.writelines(traceback.format_exception(*exc_info))
            f.write("\n")
    except Exception as log_error:
        print(f"[CRASH] Failed to write crash log: {log_error}")
    print(f"[CRASH] Details written to: {CRASH_LOG_PATH}")


def install_crash_handlers():
    """Route unhandled Python and thread exceptions to the crash log."""
    global _crash_handlers_installed
    if _crash_handlers_installed:
        return

    def _unhandled_exception(exc_type, exc_value, exc_traceback):
        _append_crash_log("UNHANDLED EXCEPTION", (exc_type, exc_value, exc_traceback))
        sys.__excepthook__(exc_type, exc_value, exc_traceback)

    def _thread_exception(args):
        thread_name = getattr(args.thread, 'name', 'unknown')
        _append_crash_log(
            f"THREAD EXCEPTION ({thread_name})",
            (args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _unhandled_exception
    threading.excepthook = _thread_exception
    _crash_handlers_installed = True


def suppress_warnings():
    """Suppress all warnings when not in a development environment."""
    environment = os.getenv('MASONRY_FLOW_ENVIRONMENT')
    if environment == 'development':
        print('Running in development environment.')
        return
    logging.basicConfig(level=logging.ERROR)
    warnings.simplefilter('ignore')


def run_gui():
    app = QApplication([])
    # The application name is shown in the taskbar.
    app.setApplicationName('Masonry Flow')
    # The application display name is shown in the title bar.
    app.setApplicationDisplayName('Masonry Flow')
    app.setStyle('Fusion')

    main_window = MainWindow(app)
    main_window.show()

    def signal_handler(signum, frame):
        print("\n[SHUTDOWN] Console closing, saving settings...")
        settings.sync()
        main_window.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)  # Ctrl+C
    signal.signal(signal.SIGTERM, signal_handler)  # Termination signal

    return int(app.exec())


if __name__ == '__main__':
    suppress_warnings()
    install_crash_handlers()
    try:
        sys.exit(run_gui())
    except Exception as exception:
        _append_crash_log("TOP-LEVEL EXCEPTION", sys.exc_info())
        error_message_box = QMessageBox()
        error_message_box.setWindowTitle('Error')
        error_message_box.setIcon(QMessageBox.Icon.Critical)
        error_message_box.setText(str(exception))
        error_message_box.setDetailedText(traceback.format_exc())
        error_message_box.exec()
        sys.exit(1)
