"""Maps API operations onto REST routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple
from urllib.parse import quote

from ...errors import SerumClientError, StreamingNotSupportedError
from ..base import Operation, Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """HTTP method and path template for one operation.

    Parameters named in ``path_params`` are substituted into the path; the
    rest go in the query string (GET) or the JSON body (POST).
    """

    method: str
    path: str
    path_params: Tuple[str, ...] = ()


ROUTES: Dict[Operation, Route] = {
    Operation.GET_ORDERBOOK: Route("GET", "/api/v1/market/orderbooks/{market}", ("market",)),
    Operation.GET_TRADES: Route("GET", "/api/v1/market/trades/{market}", ("market",)),
    Operation.GET_TICKERS: Route("GET", "/api/v1/market/tickers/{market}", ("market",)),
    Operation.GET_OPEN_ORDERS: Route("GET", "/api/v1/trade/openorders/{market}", ("market",)),
    Operation.GET_UNSETTLED: Route("GET", "/api/v1/trade/unsettled/{market}", ("market",)),
    Operation.GET_ACCOUNT_BALANCE: Route("GET", "/api/v1/account/balance"),
    Operation.GET_MARKETS: Route("GET", "/api/v1/market/markets"),
    Operation.POST_ORDER: Route("POST", "/api/v1/trade/place"),
    Operation.POST_SUBMIT: Route("POST", "/api/v1/trade/submit"),
    Operation.POST_CANCEL_ORDER: Route("POST", "/api/v1/trade/cancel"),
    Operation.POST_CANCEL_BY_CLIENT_ORDER_ID: Route("POST", "/api/v1/trade/cancelbyid"),
    Operation.POST_CANCEL_ALL: Route("POST", "/api/v1/trade/cancelall"),
    Operation.POST_SETTLE: Route("POST", "/api/v1/trade/settle"),
}


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RequestBuilder:
    """Turns a ``Request`` into the method, URL and aiohttp kwargs for one call."""

    def __init__(self, base_url: str, routes: Mapping[Operation, Route] = ROUTES) -> None:
        self._base_url = base_url.rstrip("/")
        self._routes = routes

    @property
    def base_url(self) -> str:
        return self._base_url

    def route_for(self, operation: Operation) -> Route:
        route = self._routes.get(operation)
        if route is None:
            if operation.method_name.endswith("Stream"):
                raise StreamingNotSupportedError(
                    f"{operation.method_name} requires a streaming transport (WebSocket or gRPC)",
                    operation_name=operation.method_name,
                )
            raise SerumClientError(f"No HTTP route for {operation.method_name}", operation_name=operation.method_name)
        return route

    def build_request_context(self, request: Request) -> Tuple[str, str, Dict[str, Any]]:
        """Build ``(method, url, request_kwargs)`` for ``request``."""
        route = self.route_for(request.operation)
        params = request.wire_params()

        path_values = {name: quote(str(params.pop(name, "")), safe="/:-") for name in route.path_params}
        url = f"{self._base_url}{route.path.format(**path_values)}"

        request_kwargs: Dict[str, Any] = {}
        if route.method == "GET":
            if params:
                request_kwargs["params"] = {key: _query_value(value) for key, value in params.items()}
        else:
            request_kwargs["json"] = params

        logger.debug("Built %s %s for %s", route.method, url, request.name)
        return route.method, url, request_kwargs


__all__ = ["ROUTES", "RequestBuilder", "Route"]
