"""HTTP client for the back-office API.

This module provides:
- HTTPClient: HTTP client delivering queued mutations to the server
- Health check used by the connectivity probe
- One request per mutation kind (sales, products, customers, employees,
  credentials, cashier reports)

All write requests are expected to be idempotent on the server side:
the outbox delivers at least once.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from possync.core.config import ServerConfig

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authentication failed."""


class ConflictError(APIError):
    """Server rejected the change as conflicting."""


class NotFoundError(APIError):
    """Resource not found."""


def _require(data: dict[str, Any], key: str) -> Any:
    """Get a required identifier from a payload."""
    try:
        return data[key]
    except (KeyError, TypeError):
        raise ValueError(f"Payload is missing required field '{key}'") from None


class HTTPClient:
    """HTTP client for the back-office API."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server configuration with URL, token, and settings.
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers={"Authorization": f"Bearer {config.token}"},
        )

    @property
    def config(self) -> ServerConfig:
        """Get the server configuration."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code == 401:
            raise AuthenticationError("Invalid or expired token", 401)
        if response.status_code == 404:
            raise NotFoundError("Resource not found", 404)
        if response.status_code == 409:
            raise ConflictError(self._detail(response, "Conflict"), 409)
        if response.status_code >= 400:
            raise APIError(self._detail(response, "Unknown error"), response.status_code)
        return response

    @staticmethod
    def _detail(response: httpx.Response, default: str) -> str:
        """Extract the error detail from a response body."""
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict):
            return str(body.get("detail", default))
        return default

    # === Health check ===

    def health_check(self) -> bool:
        """Check if the server is healthy.

        Returns:
            True if server is healthy.
        """
        try:
            response = self._client.get(self._config.health_path)
            return response.status_code == 200
        except httpx.RequestError:
            return False

    # === Sales ===

    def push_sale(self, sale: dict[str, Any]) -> None:
        """Record a completed sale."""
        logger.debug("Pushing sale %s", sale.get("id"))
        self._handle_response(self._client.post("/api/sales", json=sale))

    def push_cashier_report(self, report: dict[str, Any]) -> None:
        """Forward a cashier sale report to the admin dashboard."""
        logger.debug("Pushing cashier report %s", report.get("reportId"))
        self._handle_response(self._client.post("/api/cashier-reports", json=report))

    # === Catalog and customers ===

    def upsert_product(self, product: dict[str, Any]) -> None:
        """Create or replace a product."""
        product_id = _require(product, "id")
        self._handle_response(self._client.put(f"/api/products/{product_id}", json=product))

    def upsert_customer(self, customer: dict[str, Any]) -> None:
        """Create or replace a customer."""
        customer_id = _require(customer, "id")
        self._handle_response(
            self._client.put(f"/api/customers/{customer_id}", json=customer)
        )

    # === Employees ===

    def create_employee(self, employee: dict[str, Any]) -> None:
        """Create an employee account."""
        self._handle_response(self._client.post("/api/employees", json=employee))

    def update_employee(self, data: dict[str, Any]) -> None:
        """Apply partial updates to an employee.

        Args:
            data: {"id": ..., "updates": {...}}
        """
        employee_id = _require(data, "id")
        self._handle_response(
            self._client.patch(
                f"/api/employees/{employee_id}", json=data.get("updates", {})
            )
        )

    def delete_employee(self, data: dict[str, Any]) -> None:
        """Delete an employee account.

        A 404 means the account is already gone, which counts as success.
        """
        employee_id = _require(data, "id")
        try:
            self._handle_response(self._client.delete(f"/api/employees/{employee_id}"))
        except NotFoundError:
            logger.debug("Employee %s already deleted", employee_id)

    # === Credentials ===

    def change_password(self, data: dict[str, Any]) -> None:
        """Propagate a password change made by the user themself."""
        user_id = _require(data, "userId")
        self._handle_response(
            self._client.post(
                f"/api/users/{user_id}/password",
                json={"hashedPassword": data.get("hashedPassword")},
            )
        )

    def reset_password(self, data: dict[str, Any]) -> None:
        """Propagate an admin-initiated password reset."""
        employee_id = _require(data, "employeeId")
        self._handle_response(
            self._client.post(
                f"/api/employees/{employee_id}/password-reset",
                json={"hashedPassword": data.get("hashedPassword")},
            )
        )
