"""
Test configuration for the credit-monitoring alert client.

The real API is replaced by an in-process FastAPI app that speaks the same
envelope and paging format; clients reach it through httpx.ASGITransport.
"""

import asyncio
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from tcrs.core.auth import TokenStore
from tcrs.core.config import Settings
from tcrs.core.logging import configure_logging
from tcrs.services.api_client import ApiClient

configure_logging(level="WARNING", json_output=False)

BASE_URL = "http://tcrs.test"
TEST_EMAIL = "analyst@example.com"
TEST_PASSWORD = "secret"

SEVERITY_CYCLE = ["LOW", "MEDIUM", "HIGH", "CRITICAL"]
TYPE_CYCLE = ["CREDIT_SCORE_CHANGE", "PAYMENT_DELAY", "NEW_TRADE_REFERENCE", "RISK_LEVEL_CHANGE"]


def make_alert(alert_id: int, **overrides) -> Dict[str, Any]:
    """Wire-format alert; lower ids are newer."""
    created = datetime(2024, 3, 5, 14, 30) - timedelta(minutes=alert_id)
    alert = {
        "id": alert_id,
        "businessId": 100 + alert_id % 3,
        "businessName": f"Acme Supplies {alert_id % 3}",
        "alertNumber": f"ALT-{alert_id:05d}",
        "alertType": TYPE_CYCLE[alert_id % len(TYPE_CYCLE)],
        "severityLevel": SEVERITY_CYCLE[alert_id % len(SEVERITY_CYCLE)],
        "title": f"Alert {alert_id}",
        "description": f"Something changed for business {alert_id % 3}",
        "details": '{"source": "bureau"}',
        "previousValue": "720",
        "currentValue": "690",
        "thresholdValue": None,
        "changeAmount": -30,
        "changePercentage": -4.17,
        "isRead": False,
        "isAcknowledged": False,
        "acknowledgedBy": None,
        "acknowledgedDate": None,
        "acknowledgmentNotes": None,
        "relatedEntityType": "BUSINESS",
        "relatedEntityId": 100 + alert_id % 3,
        "expiresAt": None,
        "createdAt": created.isoformat(),
    }
    alert.update(overrides)
    return alert


class FakeCreditApi:
    """Mutable server state plus switches tests flip to inject failures."""

    def __init__(self):
        self.alerts: Dict[int, Dict[str, Any]] = {}
        self.monitoring: Dict[int, Dict[str, Any]] = {}
        self.requests: List[tuple] = []

        self.valid_tokens = {"access-1"}
        self.refresh_token = "refresh-1"
        self.refresh_calls = 0
        self.logout_calls = 0
        self._token_seq = 1

        self.fail_alerts = False
        self.fail_statistics = False
        self.alerts_delay = 0.0
        self.statistics_delay = 0.0

    def seed_alerts(self, count: int, **overrides) -> None:
        for alert_id in range(1, count + 1):
            self.alerts[alert_id] = make_alert(alert_id, **overrides)

    def seed_monitoring(self, count: int) -> None:
        for monitoring_id in range(1, count + 1):
            self.monitoring[monitoring_id] = {
                "id": monitoring_id,
                "businessId": 100 + monitoring_id,
                "businessName": f"Acme Supplies {monitoring_id}",
                "monitoringName": f"Watch {monitoring_id}",
                "monitoringType": "COMPREHENSIVE",
                "isActive": True,
                "notificationFrequency": "DAILY",
                "totalAlertsSent": monitoring_id * 2,
            }

    def expire_access_tokens(self) -> None:
        self.valid_tokens.clear()

    def issue_access_token(self) -> str:
        self._token_seq += 1
        token = f"access-{self._token_seq}"
        self.valid_tokens.add(token)
        return token

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.requests if m == method and p == path)

    def statistics(self) -> Dict[str, Any]:
        alerts = list(self.alerts.values())
        by_severity = {s: sum(1 for a in alerts if a["severityLevel"] == s) for s in SEVERITY_CYCLE}
        distribution: Dict[str, int] = {}
        for alert in alerts:
            distribution[alert["alertType"]] = distribution.get(alert["alertType"], 0) + 1
        return {
            "totalAlerts": len(alerts),
            "unreadAlerts": sum(1 for a in alerts if not a["isRead"]),
            "unacknowledgedAlerts": sum(1 for a in alerts if not a["isAcknowledged"]),
            "activeMonitoring": sum(1 for m in self.monitoring.values() if m["isActive"]),
            "criticalAlerts": by_severity["CRITICAL"],
            "highAlerts": by_severity["HIGH"],
            "mediumAlerts": by_severity["MEDIUM"],
            "lowAlerts": by_severity["LOW"],
            "recentAlerts": len(alerts),
            "alertTypeDistribution": distribution,
        }


def envelope(data: Any, message: str = "OK") -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data, "timestamp": datetime.now().isoformat()}


def failure(status_code: int, message: str, validation_errors: Optional[Dict[str, str]] = None) -> JSONResponse:
    body = {"success": False, "message": message, "data": None, "timestamp": datetime.now().isoformat()}
    if validation_errors:
        body["validationErrors"] = validation_errors
    return JSONResponse(status_code=status_code, content=body)


def paginate(items: List[Dict[str, Any]], page: int, size: int) -> Dict[str, Any]:
    total = len(items)
    total_pages = math.ceil(total / size) if size else 0
    return {
        "content": items[page * size:(page + 1) * size],
        "totalElements": total,
        "totalPages": total_pages,
        "number": page,
        "size": size,
        "hasNext": page < total_pages - 1,
        "hasPrevious": page > 0,
    }


def create_app(backend: FakeCreditApi) -> FastAPI:
    """Build the fake credit-monitoring API around a FakeCreditApi."""

    async def record(request: Request):
        backend.requests.append((request.method, request.url.path, dict(request.query_params)))

    async def require_user(request: Request):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer ") or header[len("Bearer "):] not in backend.valid_tokens:
            raise HTTPException(status_code=401, detail="Unauthorized")

    app = FastAPI(dependencies=[Depends(record)])

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return failure(exc.status_code, str(exc.detail))

    # Auth

    @app.post("/api/auth/login")
    async def login(request: Request):
        payload = await request.json()
        if payload.get("email") != TEST_EMAIL or payload.get("password") != TEST_PASSWORD:
            return failure(401, "Invalid email or password")
        token = backend.issue_access_token()
        return envelope({
            "accessToken": token,
            "refreshToken": backend.refresh_token,
            "user": {"email": TEST_EMAIL, "firstName": "Ada"},
        })

    @app.post("/api/auth/refresh")
    async def refresh(request: Request):
        payload = await request.json()
        backend.refresh_calls += 1
        if payload.get("refreshToken") != backend.refresh_token:
            return failure(401, "Invalid refresh token")
        return envelope({"accessToken": backend.issue_access_token()})

    @app.post("/api/auth/logout")
    async def logout(request: Request):
        backend.logout_calls += 1
        return envelope(None, "Logged out")

    # Alerts

    @app.get("/api/credit-monitoring/alerts", dependencies=[Depends(require_user)])
    async def list_alerts(page: int = 0, size: int = 10, unreadOnly: bool = False):
        if backend.alerts_delay:
            await asyncio.sleep(backend.alerts_delay)
        if backend.fail_alerts:
            return failure(500, "Alert service unavailable")
        alerts = sorted(backend.alerts.values(), key=lambda a: a["id"])
        if unreadOnly:
            alerts = [a for a in alerts if not a["isRead"]]
        return envelope(paginate(alerts, page, size))

    @app.get("/api/credit-monitoring/statistics", dependencies=[Depends(require_user)])
    async def statistics():
        if backend.statistics_delay:
            await asyncio.sleep(backend.statistics_delay)
        if backend.fail_statistics:
            return failure(500, "Statistics unavailable")
        return envelope(backend.statistics())

    @app.post("/api/credit-monitoring/alerts/{alert_id}/mark-read", dependencies=[Depends(require_user)])
    async def mark_read(alert_id: int):
        alert = backend.alerts.get(alert_id)
        if alert is None:
            return failure(404, "Alert not found")
        alert["isRead"] = True
        return envelope(alert, "Alert marked as read")

    @app.post("/api/credit-monitoring/alerts/{alert_id}/acknowledge", dependencies=[Depends(require_user)])
    async def acknowledge(alert_id: int, request: Request):
        payload = await request.json()
        alert = backend.alerts.get(alert_id)
        if alert is None:
            return failure(404, "Alert not found")
        if alert["isAcknowledged"]:
            return failure(409, "Alert has already been acknowledged")
        alert.update({
            "isAcknowledged": True,
            "acknowledgedBy": TEST_EMAIL,
            "acknowledgedDate": datetime(2024, 3, 6, 9, 0).isoformat(),
            "acknowledgmentNotes": payload.get("notes"),
        })
        return envelope(alert, "Alert acknowledged")

    # Monitoring setups

    @app.post("/api/credit-monitoring", dependencies=[Depends(require_user)])
    async def create_monitoring(request: Request):
        payload = await request.json()
        if any(m["businessId"] == payload.get("businessId") and m["isActive"] for m in backend.monitoring.values()):
            return failure(400, "Validation failed", {"businessId": "Business is already being monitored"})
        monitoring_id = max(backend.monitoring, default=0) + 1
        created = dict(payload, id=monitoring_id, businessName=f"Business {payload['businessId']}", isActive=True)
        backend.monitoring[monitoring_id] = created
        return envelope(created, "Credit monitoring setup successfully")

    @app.put("/api/credit-monitoring/{monitoring_id}", dependencies=[Depends(require_user)])
    async def update_monitoring(monitoring_id: int, request: Request):
        existing = backend.monitoring.get(monitoring_id)
        if existing is None:
            return failure(404, "Monitoring not found")
        existing.update(await request.json())
        return envelope(existing, "Credit monitoring updated successfully")

    @app.get("/api/credit-monitoring/my-monitoring", dependencies=[Depends(require_user)])
    async def my_monitoring(page: int = 0, size: int = 10):
        return envelope(paginate(sorted(backend.monitoring.values(), key=lambda m: m["id"]), page, size))

    @app.delete("/api/credit-monitoring/{monitoring_id}", dependencies=[Depends(require_user)])
    async def deactivate_monitoring(monitoring_id: int):
        existing = backend.monitoring.get(monitoring_id)
        if existing is None:
            return failure(404, "Monitoring not found")
        existing["isActive"] = False
        return envelope("Credit monitoring deactivated successfully")

    return app


@pytest.fixture
def backend():
    """Fake API state, seeded per test."""
    return FakeCreditApi()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        API_BASE_URL=BASE_URL + "/",
        TOKEN_STORE_PATH=tmp_path / "tokens.json",
        STATISTICS_POLL_INTERVAL=300,
    )


@pytest.fixture
def token_store(test_settings):
    """Token store already holding a valid session."""
    store = TokenStore(test_settings.TOKEN_STORE_PATH)
    store.set_tokens("access-1", "refresh-1", {"email": TEST_EMAIL})
    return store


@pytest.fixture
def make_client(backend, test_settings, token_store):
    """Factory for API clients wired to the fake API; call it inside the event loop."""
    app = create_app(backend)

    def factory() -> ApiClient:
        return ApiClient(
            settings=test_settings,
            token_store=token_store,
            transport=httpx.ASGITransport(app=app),
        )

    return factory
