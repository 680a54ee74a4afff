"""
Named request/response channel between application code and the host.

Callers invoke a method by name and get exactly one reply back: a success
value, an error, or "not implemented". Handler exceptions are turned into
error replies so nothing propagates to the caller.
"""
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ContextManager, Dict, Optional
from .log import log_error


@dataclass
class MethodCall:
    method: str
    arguments: Any = None


class ReplyStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"
    NOT_IMPLEMENTED = "not_implemented"


@dataclass
class ChannelReply:
    status: ReplyStatus
    value: Any = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Any = None

    @property
    def is_success(self) -> bool:
        return self.status is ReplyStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        if self.status is ReplyStatus.SUCCESS:
            return {"result": self.value}
        if self.status is ReplyStatus.NOT_IMPLEMENTED:
            return {"error": "not implemented"}
        return {
            "error": self.error_code,
            "message": self.error_message,
            "details": self.error_details,
        }


class MethodResult:
    """Reply sink handed to a method call handler. Accepts one reply."""

    def __init__(self) -> None:
        self.reply: Optional[ChannelReply] = None

    def success(self, value: Any = None) -> None:
        self._submit(ChannelReply(ReplyStatus.SUCCESS, value=value))

    def error(self, code: str, message: Optional[str] = None, details: Any = None) -> None:
        self._submit(ChannelReply(ReplyStatus.ERROR, error_code=code,
                                  error_message=message, error_details=details))

    def not_implemented(self) -> None:
        self._submit(ChannelReply(ReplyStatus.NOT_IMPLEMENTED))

    def _submit(self, reply: ChannelReply) -> None:
        if self.reply is not None:
            raise RuntimeError("Reply already submitted")
        self.reply = reply


MethodCallHandler = Callable[[MethodCall, MethodResult], None]


class MethodChannel:
    """A named channel dispatching calls to a single handler."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handler: Optional[MethodCallHandler] = None
        # Calls may come from the UI loop and from the HTTP bridge thread
        self._lock = threading.RLock()

    def set_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        # Not under the lock: detaching must not wait for a call in flight
        self._handler = handler

    def serialized(self) -> ContextManager[bool]:
        """Hold the dispatch lock, e.g. to run work that must not overlap a call."""
        return self._lock

    def invoke_method(self, method: str, arguments: Any = None) -> ChannelReply:
        with self._lock:
            if self._handler is None:
                return ChannelReply(ReplyStatus.NOT_IMPLEMENTED)

            result = MethodResult()
            try:
                self._handler(MethodCall(method, arguments), result)
            except Exception as e:
                log_error("MethodChannel", f"Handler for {self.name}.{method} failed", e)
                return ChannelReply(ReplyStatus.ERROR, error_code="error", error_message=str(e))

            if result.reply is None:
                return ChannelReply(ReplyStatus.ERROR, error_code="no_reply",
                                    error_message=f"{method} did not reply")
            return result.reply
