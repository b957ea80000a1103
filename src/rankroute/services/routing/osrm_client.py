"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ..geospatial import HasLocation

logger = logging.getLogger(__name__)


class OSRMError(Exception):
    """Base error for failed OSRM requests."""


class OSRMConnectionError(OSRMError):
    """The OSRM service could not be reached or timed out."""


class OSRMResponseError(OSRMError):
    """OSRM answered with a non-success HTTP status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OSRMNoRouteError(OSRMError):
    """OSRM answered but reported that no route exists."""


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)))

    def route(self, coordinates: Sequence[tuple[float, float]]) -> dict:
        """Request a road-following route through the waypoints in order.

        Makes exactly one request; retrying is left to the caller.

        Args:
            coordinates: Sequence of (lat, lon) tuples for the route waypoints

        Returns:
            The first candidate route from the OSRM payload, with ``distance``
            in meters, ``duration`` in seconds and GeoJSON ``geometry``.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise OSRMResponseError(
                f"OSRM route request returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            raise OSRMConnectionError(f"Failed to connect to OSRM service at {self.base_url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise OSRMConnectionError(f"OSRM route request failed: {exc}") from exc
        except ValueError as exc:
            raise OSRMResponseError(f"OSRM route response is not valid JSON: {exc}") from exc
        finally:
            client.close()

        if not isinstance(data, dict):
            raise OSRMResponseError("OSRM route response is not a JSON object.")
        if data.get("code") != "Ok":
            error_msg = data.get("message") or data.get("code") or "Unknown OSRM route error"
            raise OSRMNoRouteError(f"OSRM route request failed: {error_msg}")
        routes = data.get("routes")
        if not routes:
            raise OSRMNoRouteError("OSRM returned no candidate routes.")
        if not isinstance(routes, list) or not isinstance(routes[0], dict):
            raise OSRMResponseError("OSRM route payload has no route list.")

        logger.debug(f"OSRM route resolved for {len(coordinates)} waypoints")
        return routes[0]


def build_waypoints(depot: HasLocation, stops: Sequence[HasLocation]) -> list[tuple[float, float]]:
    """Build the closed (lat, lon) waypoint list depot -> stops -> depot."""
    depot_point = (depot.latitude, depot.longitude)
    return [depot_point, *((stop.latitude, stop.longitude) for stop in stops), depot_point]


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        # Two points in central Harare
        test_coords = "31.0522,-17.8292;31.0495,-17.8275"
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        data = response.json()
        return isinstance(data, dict) and data.get("code") == "Ok"
    except httpx.HTTPError:
        return False
    except ValueError:
        return False
