"""
Tests for the banner, health and analytics endpoints, and app lifecycle.
"""

from __future__ import annotations

import dataclasses
from unittest.mock import patch

from fastapi import status
from fastapi.concurrency import run_in_threadpool
from fastapi.testclient import TestClient

from api.main import create_app
from api.routes import ROUTES
from shared import __version__
from shared.context import ServiceContext
from shared.events import DatabaseEvent


def test_index(client):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["version"] == __version__


def test_health_reports_database_and_cache(client):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "database": True, "cache": True}


def test_health_without_cache(config):
    context = ServiceContext(config)
    with TestClient(create_app(context)) as client:
        response = client.get("/health")

    assert response.json() == {"status": "ok", "database": True, "cache": None}


def test_analytics_counts_requests_and_queries(client, signup):
    signup("august")

    response = client.get("/analytics")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["requests"] >= 3
    assert data["db_calls"] > 0
    assert data["database"] is None


def test_analytics_includes_latest_snapshot(client, context, signup):
    signup("august")
    context.analytics.collect_stats()

    data = client.get("/analytics").json()

    assert data["database"]["users"] == 1
    assert data["database"]["organisations"] == 0
    assert data["database"]["online"] is True


def test_analytics_disabled_returns_404(config):
    context = ServiceContext(dataclasses.replace(config, analytics_enabled=False))
    with TestClient(create_app(context)) as client:
        response = client.get("/analytics")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert context.analytics.requests == 0


def test_lifespan_connects_and_disposes(context):
    events = []
    context.database.events.on(DatabaseEvent.ONLINE, lambda: events.append("online"))
    context.database.events.on(DatabaseEvent.OFFLINE, lambda: events.append("offline"))

    with TestClient(create_app(context)):
        assert context.database.connected is True
        assert context.analytics.collecting is True

    assert context.database.connected is False
    assert context.analytics.collecting is False
    assert events == ["online", "offline"]


def test_every_registered_router_is_mounted(client):
    paths = {route.path for route in client.app.routes}

    for router in ROUTES.values():
        for route in router.routes:
            assert route.path in paths


def test_lifespan_runs_database_calls_off_the_event_loop(context):
    with patch("api.main.run_in_threadpool", wraps=run_in_threadpool) as offload:
        with TestClient(create_app(context)):
            assert context.database.connected is True

    offloaded = [call.args[0] for call in offload.call_args_list]
    assert offloaded == [context.database.connect, context.close]
