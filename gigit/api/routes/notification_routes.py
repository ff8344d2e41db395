"""
Notification Routes

GET /notifications - List my notifications (paginated, optional unread filter)
GET /notifications/count - Unread count
PUT /notifications - markRead / markAllRead
DELETE /notifications?id= - Delete one of my notifications
"""

import math

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text

from gigit.db.database import get_db_session, fetch_all
from gigit.core.auth import get_current_user
from gigit.schemas.schemas import (
    NotificationAction, NotificationResponse, NotificationListResponse, NotificationCountResponse,
    Pagination, MessageResponse
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread: bool = Query(False, description="Only unread notifications"),
    user: dict = Depends(get_current_user)
):
    where = " WHERE user_id = :uid"
    params = {"uid": user["user_id"]}
    if unread:
        where += " AND is_read = :is_read"
        params["is_read"] = False

    with get_db_session() as db:
        total = db.execute(text("SELECT COUNT(*) FROM notifications" + where), params).scalar() or 0
        rows = fetch_all(
            db,
            "SELECT id, type, title, message, link, is_read, created_at FROM notifications"
            + where + " ORDER BY created_at DESC LIMIT :limit OFFSET :offset",
            {**params, "limit": limit, "offset": (page - 1) * limit}
        )

    return NotificationListResponse(
        notifications=[NotificationResponse(**r) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
    )


@router.get("/count", response_model=NotificationCountResponse)
async def unread_count(user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        count = db.execute(
            text("SELECT COUNT(*) FROM notifications WHERE user_id = :uid AND is_read = :is_read"),
            {"uid": user["user_id"], "is_read": False}
        ).scalar()
    return NotificationCountResponse(count=count or 0)


@router.put("", response_model=MessageResponse)
async def mark_notifications(data: NotificationAction, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        if data.action == "markRead":
            result = db.execute(
                text("UPDATE notifications SET is_read = :is_read WHERE id = :id AND user_id = :uid"),
                {"is_read": True, "id": data.notification_id, "uid": user["user_id"]}
            )
            if result.rowcount == 0:
                raise HTTPException(status_code=404, detail="Notification not found")
            return MessageResponse(message="Notification marked as read")

        db.execute(
            text("UPDATE notifications SET is_read = :is_read WHERE user_id = :uid"),
            {"is_read": True, "uid": user["user_id"]}
        )
    return MessageResponse(message="All notifications marked as read")


@router.delete("", response_model=MessageResponse)
async def delete_notification(
    notification_id: str = Query(..., alias="id"),
    user: dict = Depends(get_current_user)
):
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM notifications WHERE id = :id AND user_id = :uid"),
            {"id": notification_id, "uid": user["user_id"]}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Notification not found")

    return MessageResponse(message="Notification deleted")
