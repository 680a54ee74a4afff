"""
Flask bridge exposing the host's method channels over local HTTP.

Lets application code living in another process call the same
enableWakeLock/disableWakeLock operations as the tray menu.
"""
import socket
import threading
from typing import Any, Iterable, Optional, TYPE_CHECKING
from flask import Flask, jsonify, request
from ..config import WEB_PORTS
from ..channel import ReplyStatus

if TYPE_CHECKING:
    from ..host import HostActivity


def find_free_port(ports: Iterable[int] = WEB_PORTS) -> int:
    """Return the first port from ports that can be bound on localhost."""
    tried = []
    for port in ports:
        tried.append(port)
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(("127.0.0.1", port))
                return port
            except OSError:
                continue
    raise RuntimeError(f"No free port found ({'/'.join(str(p) for p in tried)} busy)")


def create_app(host: 'HostActivity') -> Flask:
    """Create the bridge app serving the channels of host."""
    app = Flask(__name__)

    @app.route("/channel/<path:channel_name>/<method>", methods=["POST"])
    def invoke(channel_name: str, method: str) -> Any:  # pyright: ignore[reportUnusedFunction]
        channel = host.channels.get(channel_name)
        if channel is None:
            return jsonify({"error": f"unknown channel {channel_name}"}), 404

        arguments = request.get_json(silent=True)
        reply = channel.invoke_method(method, arguments)

        if reply.status is ReplyStatus.SUCCESS:
            return jsonify(reply.to_dict())
        if reply.status is ReplyStatus.NOT_IMPLEMENTED:
            return jsonify(reply.to_dict()), 501
        return jsonify(reply.to_dict()), 500

    @app.route("/status")
    def status() -> Any:  # pyright: ignore[reportUnusedFunction]
        session = host.controller.session
        payload = session.to_dict() if session is not None else {
            "state": host.controller.state.value,
            "held": False,
            "max_duration": host.controller.max_duration,
            "acquired_at": None,
        }
        payload["platform"] = host.platform.name
        payload["window_flags"] = int(host.platform.window_flags)
        payload["last_result"] = {
            "ok": host.controller.last_result.ok,
            "reason": host.controller.last_result.reason,
        }
        return jsonify(payload)

    return app


class WebBridge:
    """Runs the bridge app in a daemon thread next to the Qt loop."""

    def __init__(self, host: 'HostActivity') -> None:
        self.host = host
        self.server_port: Optional[int] = None
        self.server_thread: Optional[threading.Thread] = None
        self.flask_app: Optional[Flask] = None

    def get_url(self) -> str:
        return f"http://127.0.0.1:{self.server_port or WEB_PORTS[0]}"

    def start(self) -> bool:
        if self.server_port:
            return True  # Already started

        try:
            self.flask_app = create_app(self.host)
            self.server_port = find_free_port()
            self.server_thread = threading.Thread(target=self._run_server, daemon=True)
            self.server_thread.start()
            print(f"Wake lock bridge at {self.get_url()}")
            return True
        except Exception as e:
            print(f"Web bridge failed: {e}")
            self.server_port = None
            return False

    def _run_server(self) -> None:
        """Run Flask server (executed in thread)."""
        if self.flask_app and self.server_port:
            self.flask_app.run(
                host="127.0.0.1",
                port=self.server_port,
                debug=False,
                use_reloader=False
            )
