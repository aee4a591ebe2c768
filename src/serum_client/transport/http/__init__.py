"""HTTP transport."""

from .request_builder import ROUTES, RequestBuilder, Route
from .request_executor import RequestExecutor
from .session_manager import SessionManager
from .transport import HTTPTransport

__all__ = ["HTTPTransport", "ROUTES", "RequestBuilder", "RequestExecutor", "Route", "SessionManager"]
