import os

import requests
from aws_lambda_powertools import Logger

from services.booking.domain.gateway import FlightInventoryClient
from services.booking.domain.value_object import FlightInventory
from services.shared.domain import ResourceNotFoundException
from services.shared.infrastructure import UpstreamServiceException
from services.shared.utils import to_decimal

logger = Logger(child=True)

DEFAULT_TIMEOUT_SECONDS = 3.0


class HttpFlightInventoryClient(FlightInventoryClient):
    """フライト在庫サービスの HTTP クライアント

    トランザクションを開いたまま呼び出すため、タイムアウトは短く設定し、
    タイムアウトは失敗（ロールバック対象）として扱う。
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = (base_url or os.getenv("FLIGHT_SERVICE_URL", "")).rstrip("/")
        self._timeout = (
            timeout
            if timeout is not None
            else float(os.getenv("FLIGHT_SERVICE_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
        )
        self._session = session or requests.Session()

    def get_flight(self, flight_id: str) -> FlightInventory:
        response = self._request("GET", f"/api/v1/flights/{flight_id}")
        if response.status_code == 404:
            raise ResourceNotFoundException("Flight not found", flight_id=flight_id)
        self._raise_for_status(response, flight_id)

        try:
            body = response.json()
            # 在庫サービスは {"data": {...}} のエンベロープで返す
            data = body.get("data", body) if isinstance(body, dict) else {}
            return FlightInventory(
                flight_id=flight_id,
                total_seats=int(data["totalSeats"]),
                price=to_decimal(data["price"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamServiceException(
                "Flight service returned an unexpected response", flight_id=flight_id
            ) from e

    def reserve_seats(self, flight_id: str, seats: int) -> None:
        response = self._request(
            "PATCH", f"/api/v1/flights/{flight_id}/seats", json={"seats": seats}
        )
        self._raise_for_status(response, flight_id)

    def release_seats(self, flight_id: str, seats: int) -> None:
        response = self._request(
            "PATCH", f"/api/v1/flights/{flight_id}/seats/add", json={"seats": seats}
        )
        self._raise_for_status(response, flight_id)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.Timeout as e:
            raise UpstreamServiceException(
                "Flight service timed out", method=method, url=url
            ) from e
        except requests.RequestException as e:
            raise UpstreamServiceException(
                "Flight service request failed", method=method, url=url
            ) from e

    @staticmethod
    def _raise_for_status(response: requests.Response, flight_id: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.warning(
                "Flight service returned an error",
                extra={"flight_id": flight_id, "status_code": response.status_code},
            )
            raise UpstreamServiceException(
                "Flight service returned an error",
                flight_id=flight_id,
                status_code=response.status_code,
            ) from e
