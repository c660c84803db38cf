"""Tests for API endpoints using FastAPI TestClient."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gift_resolver.database import get_db, init_db
from gift_resolver.errors import InvalidInput, MalformedSlug, NotFound, UpstreamError
from gift_resolver.main import app, app_state
from gift_resolver.schemas import ResolvedItem, SupplyRecord


@pytest.fixture()
def test_db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    TestSession = sessionmaker(bind=engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def mock_resolver():
    resolver = AsyncMock()
    app_state["resolver"] = resolver
    yield resolver
    app_state.clear()


@pytest.fixture()
def client(test_db, mock_resolver):
    return TestClient(app, raise_server_exceptions=False)


MOCK_ITEM = ResolvedItem(
    slug="Desk-Clock-7",
    gift_title="Desk Clock",
    serial_number=7,
    model="Golden",
    issued_count=120,
    total_supply=1000,
)


class TestHealthEndpoint:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["time"].endswith("Z")
        assert data["cache"] in ("ok", "disabled")


class TestResolveEndpoint:
    def test_resolve(self, client, mock_resolver):
        mock_resolver.resolve_item = AsyncMock(return_value=MOCK_ITEM)
        resp = client.get("/v1/nft/resolve", params={"slug": "Desk-Clock-7"})
        assert resp.status_code == 200
        assert resp.json() == {
            "slug": "Desk-Clock-7",
            "gift": "Desk Clock",
            "number": 7,
            "model": "Golden",
            "availability_issued": 120,
            "availability_total": 1000,
        }
        mock_resolver.resolve_item.assert_awaited_once_with("Desk-Clock-7")

    def test_missing_slug(self, client, mock_resolver):
        resp = client.get("/v1/nft/resolve", params={"slug": "  "})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "missing slug"
        mock_resolver.resolve_item.assert_not_called()

    def test_malformed_slug(self, client, mock_resolver):
        mock_resolver.resolve_item = AsyncMock(side_effect=MalformedSlug("DeskClock"))
        resp = client.get("/v1/nft/resolve", params={"slug": "DeskClock"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid slug, expected GiftSlug-123"

    def test_not_found(self, client, mock_resolver):
        mock_resolver.resolve_item = AsyncMock(side_effect=NotFound("DeskClock-9 not found"))
        resp = client.get("/v1/nft/resolve", params={"slug": "DeskClock-9"})
        assert resp.status_code == 404

    def test_upstream_error(self, client, mock_resolver):
        mock_resolver.resolve_item = AsyncMock(side_effect=UpstreamError("poso status 500"))
        resp = client.get("/v1/nft/resolve", params={"slug": "DeskClock-9"})
        assert resp.status_code == 502

    def test_not_ready(self, test_db):
        app_state.clear()
        resp = TestClient(app, raise_server_exceptions=False).get(
            "/v1/nft/resolve", params={"slug": "DeskClock-9"}
        )
        assert resp.status_code == 503


class TestSupplyEndpoint:
    def test_supply(self, client, mock_resolver):
        mock_resolver.resolve_supply = AsyncMock(return_value=SupplyRecord(
            slug_base="KissedFrog", display_name="Kissed Frog", issued_count=14046, total_supply=14278,
        ))
        resp = client.get("/v1/gifts/supply", params={"gift": "Kissed Frog"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["slug"] == "KissedFrog"
        assert data["gift"] == "Kissed Frog"
        assert data["issued"] == data["availability_issued"] == 14046
        assert data["total"] == data["availability_total"] == 14278

    def test_missing_gift(self, client):
        resp = client.get("/v1/gifts/supply")
        assert resp.status_code == 400

    def test_invalid_gift(self, client, mock_resolver):
        mock_resolver.resolve_supply = AsyncMock(side_effect=InvalidInput("invalid gift"))
        resp = client.get("/v1/gifts/supply", params={"gift": "!!!"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid gift"

    def test_upstream_error(self, client, mock_resolver):
        mock_resolver.resolve_supply = AsyncMock(side_effect=UpstreamError("failed to resolve supply"))
        resp = client.get("/v1/gifts/supply", params={"gift": "Kissed Frog"})
        assert resp.status_code == 502


class TestCors:
    def test_preflight(self, client):
        resp = client.options(
            "/v1/nft/resolve",
            headers={"Origin": "https://example.com", "Access-Control-Request-Method": "GET"},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
