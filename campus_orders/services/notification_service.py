"""Notification records and the user's notification inbox"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Sequence, Tuple
from opentelemetry import trace
import enum
import logging

from campus_orders.db.database import run_in_transaction
from campus_orders.models.notification import Notification, NotificationType
from campus_orders.services.errors import (
    NotificationAccessDenied,
    NotificationDeleteDenied,
    NotificationNotFound
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RECENT_LIMIT = 10


class StatsPeriod(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

    def start(self, now: datetime) -> datetime:
        if self is StatsPeriod.TODAY:
            return now.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is StatsPeriod.WEEK:
            return now - timedelta(days=7)
        return now - timedelta(days=30)


@dataclass
class NotificationStats:
    period: StatsPeriod
    total: int
    unread: int
    read: int
    by_type: Dict[str, int] = field(default_factory=dict)
    recent: List[Notification] = field(default_factory=list)


class NotificationService:
    """Notification service for business logic"""

    @staticmethod
    def create(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.ORDER,
        order_id: Optional[int] = None
    ) -> Notification:
        """Stage a notification in the caller's transaction (no commit)"""
        notification = Notification(
            user_id=user_id,
            order_id=order_id,
            title=title,
            message=message,
            type=type,
            is_read=False
        )
        db.add(notification)
        return notification

    @staticmethod
    def get_notifications(
        db: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 20,
        type: Optional[NotificationType] = None,
        unread_only: bool = False
    ) -> Tuple[List[Notification], int, int]:
        """Get a user's notifications, newest first, with the unread count"""
        with tracer.start_as_current_span("notification_service.get_notifications") as span:
            span.set_attribute("user.id", user_id)

            query = db.query(Notification).filter(Notification.user_id == user_id)

            if type:
                query = query.filter(Notification.type == type)
            if unread_only:
                query = query.filter(Notification.is_read.is_(False))

            total = query.count()
            notifications = (
                query.order_by(Notification.created_at.desc(), Notification.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )

            unread_count = (
                db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
                .count()
            )

            return notifications, total, unread_count

    @staticmethod
    def mark_as_read(db: Session, user_id: int, notification_id: int) -> Notification:
        """Mark one of the user's notifications as read"""
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotificationNotFound(notification_id)

        if notification.user_id != user_id:
            logger.warning(f"User {user_id} tried to read notification {notification_id}")
            raise NotificationAccessDenied()

        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        """Mark every unread notification of the user as read"""
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()

        logger.info(f"Marked {updated} notifications as read for user {user_id}")
        return updated

    @staticmethod
    def delete_notification(db: Session, user_id: int, notification_id: int) -> None:
        """Delete one of the user's notifications"""
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotificationNotFound(notification_id)

        if notification.user_id != user_id:
            logger.warning(f"User {user_id} tried to delete notification {notification_id}")
            raise NotificationDeleteDenied()

        db.delete(notification)
        db.commit()
        logger.info(f"Notification {notification_id} deleted by user {user_id}")

    @staticmethod
    def broadcast(
        db: Session,
        user_ids: Sequence[int],
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM
    ) -> List[Notification]:
        """
        Send one manual notification to each listed user

        Duplicate ids are collapsed. All rows are written in a single
        transaction.
        """
        with tracer.start_as_current_span("notification_service.broadcast") as span:
            recipients = list(dict.fromkeys(user_ids))
            span.set_attribute("notification.recipients", len(recipients))
            span.set_attribute("notification.type", type.value)

            def stage(session: Session) -> List[Notification]:
                notifications = [
                    NotificationService.create(session, user_id, title, message, type)
                    for user_id in recipients
                ]
                session.flush()
                return notifications

            notifications = run_in_transaction(db, stage)
            for notification in notifications:
                db.refresh(notification)

            logger.info(f"{type.value} notification sent to {len(notifications)} users")
            return notifications

    @staticmethod
    def get_stats(db: Session, period: StatsPeriod = StatsPeriod.WEEK) -> NotificationStats:
        """Counts for notifications created within the period, with the latest ten"""
        with tracer.start_as_current_span("notification_service.get_stats") as span:
            span.set_attribute("stats.period", period.value)

            since = period.start(datetime.now(timezone.utc))
            in_period = db.query(Notification).filter(Notification.created_at >= since)

            total = in_period.count()
            unread = in_period.filter(Notification.is_read.is_(False)).count()

            by_type = {t.value: 0 for t in NotificationType}
            rows = (
                db.query(Notification.type, func.count(Notification.id))
                .filter(Notification.created_at >= since)
                .group_by(Notification.type)
                .all()
            )
            for notification_type, count in rows:
                by_type[NotificationType(notification_type).value] = count

            recent = (
                in_period.order_by(Notification.created_at.desc(), Notification.id.desc())
                .limit(RECENT_LIMIT)
                .all()
            )

            return NotificationStats(
                period=period,
                total=total,
                unread=unread,
                read=total - unread,
                by_type=by_type,
                recent=recent
            )
