"""
Notification Service - in-app notifications.

Notifications are written inside the caller's session so they commit (or
roll back) together with the change that triggered them.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from gigit.db.database import new_id, utcnow

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    link: Optional[str] = None,
) -> str:
    """Insert an unread notification for user_id and return its id."""
    notification_id = new_id()
    db.execute(
        text("""
            INSERT INTO notifications (id, user_id, type, title, message, link, is_read, created_at)
            VALUES (:id, :user_id, :type, :title, :message, :link, :is_read, :now)
        """),
        {
            "id": notification_id, "user_id": user_id, "type": notification_type,
            "title": title, "message": message, "link": link,
            "is_read": False, "now": utcnow()
        }
    )
    logger.debug("Notification %s (%s) queued for user %s", notification_id, notification_type, user_id)
    return notification_id
