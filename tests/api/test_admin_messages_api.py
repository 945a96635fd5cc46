# tests/api/test_admin_messages_api.py
"""Tests for the operator message, export and stats endpoints."""

from __future__ import annotations

import csv
import io
import json
import time
from unittest.mock import MagicMock

import pytest
from fastapi import status

from dbright_site.api.dependencies import get_store
from dbright_site.core.settings import settings
from dbright_site.services.store import MessageStore, StoreResult


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/admin/messages"),
        ("patch", "/admin/messages"),
        ("delete", "/admin/messages?id=1"),
        ("get", "/admin/export"),
        ("get", "/admin/stats"),
    ],
)
def test_admin_routes_require_session(client, method, path) -> None:
    kwargs = {"json": {"id": 1, "status": "read"}} if method == "patch" else {}
    response = client.request(method.upper(), path, **kwargs)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Unauthorized"


def test_list_messages_newest_first(admin_client, make_message) -> None:
    first = make_message(name="First")
    second = make_message(name="Second")

    response = admin_client.get("/admin/messages")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [m["id"] for m in body["messages"]] == [second, first]
    assert body["messages"][0]["status"] == "unread"


def test_list_messages_filters(admin_client, make_message) -> None:
    make_message(name="Yamada Taro", email="taro@example.jp")
    other = make_message(name="Suzuki Hanako", email="hanako@example.jp")
    admin_client.patch("/admin/messages", json={"id": other, "status": "archived"})

    archived = admin_client.get("/admin/messages", params={"status": "archived"}).json()
    assert [m["id"] for m in archived["messages"]] == [other]

    everything = admin_client.get("/admin/messages", params={"status": "all"}).json()
    assert everything["count"] == 2

    found = admin_client.get("/admin/messages", params={"search": "yamada"}).json()
    assert [m["name"] for m in found["messages"]] == ["Yamada Taro"]

    page = admin_client.get("/admin/messages", params={"limit": 1, "offset": 1}).json()
    assert page["count"] == 1


def test_list_messages_rejects_bad_parameters(admin_client) -> None:
    assert admin_client.get("/admin/messages", params={"status": "spam"}).status_code == 400
    assert admin_client.get("/admin/messages", params={"limit": 0}).status_code == 400
    assert admin_client.get("/admin/messages", params={"limit": 501}).status_code == 400


def test_status_update(admin_client, make_message, store) -> None:
    message_id = make_message()

    response = admin_client.patch("/admin/messages", json={"id": message_id, "status": "read"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is True
    assert store.query().data[0].status == "read"

    assert admin_client.patch("/admin/messages", json={"id": 424242, "status": "read"}).status_code == 200
    assert admin_client.patch("/admin/messages", json={"id": message_id, "status": "spam"}).status_code == 400
    assert admin_client.patch("/admin/messages", json={"status": "read"}).status_code == 400


def test_delete_message(admin_client, make_message, store) -> None:
    message_id = make_message()

    first = admin_client.delete("/admin/messages", params={"id": message_id})
    second = admin_client.delete("/admin/messages", params={"id": message_id})

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_200_OK
    assert store.query().data == []


def test_delete_requires_integer_id(admin_client) -> None:
    assert admin_client.delete("/admin/messages").status_code == 400
    assert admin_client.delete("/admin/messages", params={"id": "abc"}).status_code == 400


def test_export_csv_download(admin_client, make_message) -> None:
    make_message(name="Yamada, Taro", message='Say "hi"\nthanks')

    response = admin_client.get("/admin/export", params={"format": "csv"})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "text/csv; charset=utf-8"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="messages-export-')
    assert disposition.endswith('.csv"')
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[1][1] == "Yamada, Taro"
    assert rows[1][4] == 'Say "hi"\nthanks'


def test_export_defaults_to_json(admin_client, make_message) -> None:
    message_id = make_message()

    response = admin_client.get("/admin/export")

    assert response.headers["content-type"].startswith("application/json")
    assert [row["id"] for row in response.json()] == [message_id]
    assert admin_client.get("/admin/export", params={"format": "xml"}).status_code == 400


def test_stats(admin_client, make_message) -> None:
    make_message()
    read_id = make_message()
    admin_client.patch("/admin/messages", json={"id": read_id, "status": "read"})

    body = admin_client.get("/admin/stats").json()

    assert body["success"] is True
    assert body["stats"] == {"total": 2, "unread": 1, "today": 2, "week": 2}
    assert sum(day["count"] for day in body["daily_counts"]) == 2


class SlowStore(MessageStore):
    def stats(self):
        time.sleep(0.3)
        return super().stats()


def test_stats_fall_back_to_zero_on_timeout(app, admin_client, session_factory, make_message, monkeypatch) -> None:
    make_message()
    app.dependency_overrides[get_store] = lambda: SlowStore(session_factory)
    monkeypatch.setattr(settings, "stats_timeout_seconds", 0.05)

    response = admin_client.get("/admin/stats")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["stats"] == {"total": 0, "unread": 0, "today": 0, "week": 0}


def test_listing_degrades_to_empty_when_store_fails(app, admin_client) -> None:
    failing = MagicMock(spec=MessageStore)
    failing.query.return_value = StoreResult(False, [], "connection refused")
    app.dependency_overrides[get_store] = lambda: failing

    response = admin_client.get("/admin/messages")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "messages": [], "count": 0}
    assert "connection refused" not in response.text


def test_submitted_message_appears_in_console(admin_client) -> None:
    submitted = admin_client.post(
        "/contact",
        json={"name": "Yamada Taro", "email": "taro@example.com", "message": "Need a quote"},
    )
    assert submitted.status_code == status.HTTP_200_OK

    body = admin_client.get("/admin/messages").json()

    assert body["count"] == 1
    message = body["messages"][0]
    assert message["name"] == "Yamada Taro"
    assert message["email"] == "taro@example.com"
    assert message["message"] == "Need a quote"
    assert message["status"] == "unread"


def test_json_export_matches_stored_rows(admin_client, make_message, store) -> None:
    for index in range(4):
        make_message(name=f"Sender {index}", email=f"s{index}@example.com", message=f"note {index}")
    store.update_status(store.query().data[0].id, "archived")

    exported = json.loads(admin_client.get("/admin/export", params={"format": "json"}).content)
    stored = store.query().data

    assert {row["id"] for row in exported} == {row.id for row in stored}
    by_id = {row.id: row for row in stored}
    for row in exported:
        assert row["name"] == by_id[row["id"]].name
        assert row["status"] == by_id[row["id"]].status


class BrokenTimezoneStore(MessageStore):
    def stats(self):
        raise RuntimeError("unknown timezone")


def test_stats_fall_back_to_zero_on_unexpected_error(app, admin_client, session_factory) -> None:
    app.dependency_overrides[get_store] = lambda: BrokenTimezoneStore(session_factory)

    response = admin_client.get("/admin/stats")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["stats"] == {"total": 0, "unread": 0, "today": 0, "week": 0}
    assert response.json()["daily_counts"] == []
