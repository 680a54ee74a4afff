#!/usr/bin/env python3
"""
Main entrypoint for the wakeguard tray application.
"""
import signal
import sys
from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import QTimer
from .ui.tray import TrayApp


def main() -> int:
    app = QApplication(sys.argv)

    # Keep running with no windows open; the tray icon is the whole UI
    app.setQuitOnLastWindowClosed(False)

    # Quit through the Qt loop so aboutToQuit releases the wake lock
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    signal.signal(signal.SIGTERM, lambda *_: app.quit())

    # Python signal handlers only run between bytecodes; wake the interpreter
    timer = QTimer()
    timer.timeout.connect(lambda: None)  # pyright: ignore[reportGeneralTypeIssues]
    timer.start(500)

    tray_app = TrayApp()  # noqa: F841
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
