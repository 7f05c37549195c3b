"""Notification inbox tests"""
from datetime import datetime, timedelta, timezone

import pytest

from campus_orders.models.notification import Notification, NotificationType
from campus_orders.services.errors import (
    NotificationAccessDenied,
    NotificationDeleteDenied,
    NotificationNotFound
)
from campus_orders.services.notification_service import NotificationService, StatsPeriod

from tests.conftest import CLIENT_ID, OTHER_CLIENT_ID


@pytest.fixture
def inbox(db):
    rows = [
        NotificationService.create(db, CLIENT_ID, "Order confirmed", "Your order #1 ...", NotificationType.ORDER),
        NotificationService.create(db, CLIENT_ID, "2x1", "Two coffees for one", NotificationType.PROMO),
        NotificationService.create(db, CLIENT_ID, "Maintenance", "Down tonight", NotificationType.SYSTEM),
        NotificationService.create(db, OTHER_CLIENT_ID, "Order confirmed", "Your order #2 ...", NotificationType.ORDER),
    ]
    db.commit()
    return rows


def test_create_is_staged_until_commit(db):
    NotificationService.create(db, CLIENT_ID, "t", "m")
    db.rollback()

    assert db.query(Notification).count() == 0


def test_get_notifications(db, inbox):
    notifications, total, unread = NotificationService.get_notifications(db, CLIENT_ID)

    assert total == 3
    assert unread == 3
    assert {n.user_id for n in notifications} == {CLIENT_ID}

    notifications, total, unread = NotificationService.get_notifications(
        db, CLIENT_ID, type=NotificationType.PROMO
    )
    assert total == 1
    assert notifications[0].title == "2x1"


def test_mark_as_read(db, inbox):
    note = NotificationService.mark_as_read(db, CLIENT_ID, inbox[0].id)
    assert note.is_read is True

    notifications, total, unread = NotificationService.get_notifications(db, CLIENT_ID, unread_only=True)
    assert total == 2
    assert unread == 2


def test_mark_as_read_other_users_notification(db, inbox):
    with pytest.raises(NotificationAccessDenied):
        NotificationService.mark_as_read(db, CLIENT_ID, inbox[3].id)


def test_mark_as_read_unknown(db, inbox):
    with pytest.raises(NotificationNotFound):
        NotificationService.mark_as_read(db, CLIENT_ID, 5000)


def test_mark_all_as_read_only_touches_own(db, inbox):
    assert NotificationService.mark_all_as_read(db, CLIENT_ID) == 3

    assert NotificationService.get_notifications(db, CLIENT_ID)[2] == 0
    assert NotificationService.get_notifications(db, OTHER_CLIENT_ID)[2] == 1


def test_delete_notification(db, inbox):
    NotificationService.delete_notification(db, CLIENT_ID, inbox[1].id)

    assert db.query(Notification).filter(Notification.user_id == CLIENT_ID).count() == 2


def test_delete_other_users_notification(db, inbox):
    with pytest.raises(NotificationDeleteDenied) as exc_info:
        NotificationService.delete_notification(db, CLIENT_ID, inbox[3].id)

    assert exc_info.value.code == "NOTIFICATION_DELETE_DENIED"
    assert db.get(Notification, inbox[3].id) is not None


def test_delete_unknown_notification(db, inbox):
    with pytest.raises(NotificationNotFound):
        NotificationService.delete_notification(db, CLIENT_ID, 5000)


def test_broadcast(db):
    sent = NotificationService.broadcast(
        db, [CLIENT_ID, OTHER_CLIENT_ID, CLIENT_ID], "2x1", "Two coffees for one", NotificationType.PROMO
    )

    assert [n.user_id for n in sent] == [CLIENT_ID, OTHER_CLIENT_ID]
    assert all(n.id is not None and n.order_id is None for n in sent)
    assert db.query(Notification).filter(Notification.type == NotificationType.PROMO).count() == 2


def test_broadcast_defaults_to_system(db):
    sent = NotificationService.broadcast(db, [CLIENT_ID], "Maintenance", "Down tonight")

    assert sent[0].type == NotificationType.SYSTEM


def test_stats(db, inbox):
    db.add(Notification(
        user_id=CLIENT_ID,
        title="Old news",
        message="Ten days ago",
        type=NotificationType.SYSTEM,
        created_at=datetime.now(timezone.utc) - timedelta(days=10)
    ))
    db.commit()
    NotificationService.mark_as_read(db, CLIENT_ID, inbox[0].id)

    week = NotificationService.get_stats(db, StatsPeriod.WEEK)
    assert week.total == 4
    assert week.unread == 3
    assert week.read == 1
    assert week.by_type == {"ORDER": 2, "PROMO": 1, "SYSTEM": 1}
    assert len(week.recent) == 4

    month = NotificationService.get_stats(db, StatsPeriod.MONTH)
    assert month.total == 5
    assert month.by_type["SYSTEM"] == 2


def test_notification_endpoints(api, db, products, client_headers, other_headers):
    api.post(
        "/api/v1/orders",
        json={"items": [{"product_id": 1}], "delivery_location": "Cafeteria", "payment_method": "PLIN"},
        headers=client_headers,
    )

    body = api.get("/api/v1/notifications", headers=client_headers).json()
    assert body["total"] == 1
    assert body["unread_count"] == 1
    note = body["notifications"][0]
    assert note["type"] == "ORDER"
    assert note["order_id"] is not None

    response = api.patch(f"/api/v1/notifications/{note['id']}/read", headers=other_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "NOTIFICATION_ACCESS_DENIED"

    response = api.patch(f"/api/v1/notifications/{note['id']}/read", headers=client_headers)
    assert response.status_code == 200
    assert response.json()["is_read"] is True

    response = api.patch("/api/v1/notifications/read-all", headers=client_headers)
    assert response.json() == {"updated": 0}


def test_delete_endpoint(api, db, inbox, client_headers, other_headers):
    response = api.delete(f"/api/v1/notifications/{inbox[0].id}", headers=other_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "NOTIFICATION_DELETE_DENIED"

    response = api.delete(f"/api/v1/notifications/{inbox[0].id}", headers=client_headers)
    assert response.status_code == 204

    response = api.delete(f"/api/v1/notifications/{inbox[0].id}", headers=client_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NOTIFICATION_NOT_FOUND"


def test_admin_create_and_stats_endpoints(api, client_headers, admin_headers):
    payload = {"user_ids": [CLIENT_ID, OTHER_CLIENT_ID], "title": "2x1", "message": "Today only", "type": "PROMO"}

    response = api.post("/api/v1/notifications/admin/create", json=payload, headers=client_headers)
    assert response.status_code == 403

    response = api.post("/api/v1/notifications/admin/create", json=payload, headers=admin_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["count"] == 2
    assert {n["type"] for n in body["notifications"]} == {"PROMO"}

    response = api.post(
        "/api/v1/notifications/admin/create", json={**payload, "user_ids": []}, headers=admin_headers
    )
    assert response.status_code == 422

    assert api.get("/api/v1/notifications/admin/stats", headers=client_headers).status_code == 403

    body = api.get("/api/v1/notifications/admin/stats", params={"period": "month"}, headers=admin_headers).json()
    assert body["period"] == "month"
    assert body["total"] == 2
    assert body["unread"] == 2
    assert body["by_type"]["PROMO"] == 2

    inbox = api.get("/api/v1/notifications", params={"type": "PROMO"}, headers=client_headers).json()
    assert inbox["total"] == 1
