"""System tray host for the wake lock channel."""
import datetime
from typing import Optional
from PyQt5.QtWidgets import QSystemTrayIcon, QMenu, QAction, QApplication
from PyQt5.QtGui import QIcon, QPainter, QColor, QPixmap, QCursor
from PyQt5.QtCore import QTimer, Qt, QRect
from ..host import HostActivity
from ..models import SessionState
from ..services.wake_session_service import ENABLE_METHOD, DISABLE_METHOD
from ..web import WebBridge

ICON_AWAKE = "system-suspend-inhibited"
ICON_IDLE = "system-suspend"

STATUS_INTERVAL_MS = 2000


def create_colored_icon(icon_name: str, color: QColor) -> QIcon:
    """Creates a colored version of a theme icon."""
    pixmap = QPixmap(16, 16)
    pixmap.fill(Qt.transparent)

    original_icon = QIcon.fromTheme(icon_name)
    painter = QPainter(pixmap)
    original_icon.paint(painter, QRect(0, 0, 16, 16))

    painter.setCompositionMode(QPainter.CompositionMode_SourceIn)
    painter.fillRect(pixmap.rect(), color)
    painter.end()

    return QIcon(pixmap)


class TrayApp:
    """
    Tray icon hosting the wake lock session.

    Menu actions go through the same method channel as external callers,
    so the tray is just another client of the channel.
    """

    def __init__(self, host: Optional[HostActivity] = None) -> None:
        self.host = host if host is not None else HostActivity()
        self.host.on_create()
        self.channel = self.host.configure_channels()

        self.bridge: Optional[WebBridge] = self.host.start_bridge()

        self._shown_state: Optional[SessionState] = None

        self.tray_icon = QSystemTrayIcon()
        self.tray_icon.setToolTip("wakeguard")
        self.create_context_menu()
        self.tray_icon.activated.connect(self.on_tray_activated)  # pyright: ignore[reportGeneralTypeIssues]

        # The lock can expire on its own, so poll the session state
        self.timer = QTimer()
        self.timer.timeout.connect(self.update_status)  # pyright: ignore[reportGeneralTypeIssues]
        self.timer.start(STATUS_INTERVAL_MS)

        app = QApplication.instance()
        if app is not None:
            app.aboutToQuit.connect(self.on_destroy)  # pyright: ignore[reportGeneralTypeIssues]

        self.update_status()
        self.tray_icon.show()

    def create_context_menu(self) -> None:
        self.menu = QMenu()

        self.enable_action: QAction = self.menu.addAction("Keep Awake")  # pyright: ignore[reportUnknownMemberType, reportAssignmentType]
        self.enable_action.triggered.connect(self.enable_wake_lock)

        self.disable_action: QAction = self.menu.addAction("Allow Sleep")  # pyright: ignore[reportUnknownMemberType, reportAssignmentType]
        self.disable_action.triggered.connect(self.disable_wake_lock)

        if self.bridge and self.bridge.server_port:
            self.menu.addSeparator()
            bridge_action: QAction = self.menu.addAction(f"Bridge: {self.bridge.get_url()}")  # pyright: ignore[reportUnknownMemberType, reportAssignmentType]
            bridge_action.setEnabled(False)

        self.menu.addSeparator()
        exit_action: QAction = self.menu.addAction("Exit")  # type: ignore[reportUnknownMemberType, reportAssignmentType]
        exit_action.triggered.connect(self.quit_app)

        self.tray_icon.setContextMenu(self.menu)

    def on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """Left click toggles the wake lock."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            if self.host.controller.is_held:
                self.disable_wake_lock()
            else:
                self.enable_wake_lock()
        elif reason == QSystemTrayIcon.ActivationReason.Context:
            self.menu.popup(QCursor.pos())

    def enable_wake_lock(self) -> None:
        self.channel.invoke_method(ENABLE_METHOD)
        self._report_failure("Could not keep the device awake")
        self.update_status()

    def disable_wake_lock(self) -> None:
        self.channel.invoke_method(DISABLE_METHOD)
        self._report_failure("Could not release the wake lock")
        self.update_status()

    def _report_failure(self, title: str) -> None:
        result = self.host.controller.last_result
        if not result.ok:
            self.tray_icon.showMessage(title, result.reason, QSystemTrayIcon.Warning)

    def update_status(self) -> None:
        """Update tray icon and tooltip from the session state."""
        controller = self.host.controller
        state = controller.state

        if state is not self._shown_state:
            if state is SessionState.HELD:
                self.tray_icon.setIcon(create_colored_icon(ICON_AWAKE, QColor("orange")))
            else:
                self.tray_icon.setIcon(create_colored_icon(ICON_IDLE, QColor("gray")))
            self._shown_state = state

        self.enable_action.setText("Refresh Keep Awake" if state is SessionState.HELD else "Keep Awake")
        self.disable_action.setEnabled(state is SessionState.HELD)

        session = controller.session
        if state is SessionState.HELD and session is not None and session.acquired_at:
            expires = session.acquired_at + datetime.timedelta(seconds=session.max_duration)
            left = max(0.0, (expires - datetime.datetime.now()).total_seconds())
            self.tray_icon.setToolTip(f"Keeping awake ({int(left // 60)}m {int(left % 60)}s left)")
        else:
            self.tray_icon.setToolTip(f"wakeguard: idle ({self.host.platform.name})")

    def on_destroy(self) -> None:
        if self.host.destroyed:
            return
        self.timer.stop()
        self.host.on_destroy()

    def quit_app(self) -> None:
        self.on_destroy()
        self.tray_icon.hide()
        QApplication.quit()
