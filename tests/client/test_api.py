"""Tests for the back-office HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from possync.client.api import (
    APIError,
    AuthenticationError,
    ConflictError,
    HTTPClient,
    NotFoundError,
)
from possync.client.sync.appliers import build_http_registry
from possync.core.config import ServerConfig
from possync.core.types import ItemType


def make_config(
    server_url: str = "http://test", token: str = "token123"
) -> ServerConfig:
    """Create a ServerConfig for testing."""
    return ServerConfig(server_url=server_url, token=token)


class TestHTTPClient:
    """Tests for HTTPClient class."""

    def test_health_check_success(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return True when server is healthy."""
        httpx_mock.add_response(url="http://test/health", json={"status": "ok"})

        with HTTPClient(make_config()) as client:
            assert client.health_check() is True

    def test_health_check_failure(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False when server reports an error."""
        httpx_mock.add_response(url="http://test/health", status_code=500)

        with HTTPClient(make_config()) as client:
            assert client.health_check() is False

    def test_health_check_unreachable(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return False when the server cannot be reached."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with HTTPClient(make_config()) as client:
            assert client.health_check() is False

    def test_sends_bearer_token(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Requests should carry the device token."""
        httpx_mock.add_response(method="POST", url="http://test/api/sales", status_code=201)

        with HTTPClient(make_config()) as client:
            client.push_sale({"id": "sale-1", "total": 25.0})

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer token123"
        assert json.loads(request.content) == {"id": "sale-1", "total": 25.0}

    def test_upsert_product(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should PUT the product to its own URL."""
        httpx_mock.add_response(method="PUT", url="http://test/api/products/prod-7")

        with HTTPClient(make_config()) as client:
            client.upsert_product({"id": "prod-7", "name": "Coffee"})

        assert json.loads(httpx_mock.get_request().content)["name"] == "Coffee"

    def test_update_employee_sends_updates_only(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should PATCH the employee with the updates mapping."""
        httpx_mock.add_response(method="PATCH", url="http://test/api/employees/emp-1")

        with HTTPClient(make_config()) as client:
            client.update_employee({"id": "emp-1", "updates": {"role": "manager"}})

        assert json.loads(httpx_mock.get_request().content) == {"role": "manager"}

    def test_delete_employee_already_gone(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 404 on delete should count as delivered."""
        httpx_mock.add_response(
            method="DELETE", url="http://test/api/employees/emp-1", status_code=404
        )

        with HTTPClient(make_config()) as client:
            client.delete_employee({"id": "emp-1"})

    def test_change_password(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should post the hashed password for the user."""
        httpx_mock.add_response(method="POST", url="http://test/api/users/u-1/password")

        with HTTPClient(make_config()) as client:
            client.change_password({"userId": "u-1", "hashedPassword": "abc"})

        assert json.loads(httpx_mock.get_request().content) == {"hashedPassword": "abc"}

    def test_missing_identifier(self) -> None:
        """Payloads without the addressed id should be rejected locally."""
        with HTTPClient(make_config()) as client:
            with pytest.raises(ValueError, match="userId"):
                client.change_password({"hashedPassword": "abc"})

    def test_authentication_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise AuthenticationError on 401."""
        httpx_mock.add_response(method="POST", url="http://test/api/sales", status_code=401)

        with HTTPClient(make_config()) as client:
            with pytest.raises(AuthenticationError):
                client.push_sale({"id": "s"})

    def test_conflict_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise ConflictError with the server detail on 409."""
        httpx_mock.add_response(
            method="PUT",
            url="http://test/api/customers/c-1",
            status_code=409,
            json={"detail": "Customer was modified"},
        )

        with HTTPClient(make_config()) as client:
            with pytest.raises(ConflictError, match="Customer was modified"):
                client.upsert_customer({"id": "c-1"})

    def test_not_found_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise NotFoundError on 404 outside deletes."""
        httpx_mock.add_response(
            method="POST",
            url="http://test/api/employees/e-9/password-reset",
            status_code=404,
        )

        with HTTPClient(make_config()) as client:
            with pytest.raises(NotFoundError):
                client.reset_password({"employeeId": "e-9", "hashedPassword": "x"})

    def test_server_error_without_json(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise APIError with status code for other failures."""
        httpx_mock.add_response(
            method="POST", url="http://test/api/cashier-reports", status_code=502, text="Bad Gateway"
        )

        with HTTPClient(make_config()) as client:
            with pytest.raises(APIError) as exc_info:
                client.push_cashier_report({"reportId": "r-1"})

        assert exc_info.value.status_code == 502


class TestHTTPRegistry:
    """Tests for delivering through the HTTP registry."""

    def test_apply_sale(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Registry should deliver through the matching endpoint."""
        httpx_mock.add_response(method="POST", url="http://test/api/employees", status_code=201)

        with HTTPClient(make_config()) as client:
            registry = build_http_registry(client)
            registry.apply(ItemType.EMPLOYEE_CREATE, {"id": "emp-2", "username": "sam"})

        assert json.loads(httpx_mock.get_request().content)["username"] == "sam"
