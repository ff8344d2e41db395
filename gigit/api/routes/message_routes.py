"""
Message Routes

GET /messages - List my conversations with last message and unread count
POST /messages - Send a message (creates the conversation on first contact)
GET /messages/{user_id} - Conversation with another user; marks their messages read
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from gigit.db.database import get_db_session, fetch_all, fetch_one, new_id, utcnow
from gigit.core.auth import get_current_user
from gigit.services.notification_service import create_notification
from gigit.schemas.schemas import (
    ChatMessageCreate, ChatMessageResponse, ConversationSummary, ConversationDetailResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


MESSAGE_COLUMNS = "m.id, m.conversation_id, m.content, m.sent_at, m.is_read, m.sender_id"


def _find_conversation(db, user_id: str, other_user_id: str) -> Optional[str]:
    row = db.execute(
        text("""
            SELECT p1.conversation_id
            FROM conversation_participants p1
            JOIN conversation_participants p2 ON p2.conversation_id = p1.conversation_id
            WHERE p1.user_id = :a AND p2.user_id = :b
            LIMIT 1
        """),
        {"a": user_id, "b": other_user_id}
    ).fetchone()
    return row[0] if row else None


def _resolve_receiver(db, receiver_id: str) -> Optional[str]:
    """Receiver may be addressed by user id or by worker profile id."""
    row = db.execute(text("SELECT id FROM users WHERE id = :id"), {"id": receiver_id}).fetchone()
    if row:
        return row[0]
    row = db.execute(text("SELECT user_id FROM worker_profiles WHERE id = :id"), {"id": receiver_id}).fetchone()
    return row[0] if row else None


@router.get("", response_model=List[ConversationSummary])
async def list_conversations(user: dict = Depends(get_current_user)):
    """Conversations I take part in, most recently active first."""
    uid = user["user_id"]

    with get_db_session() as db:
        conversations = fetch_all(
            db,
            """
            SELECT c.id, c.updated_at
            FROM conversations c
            JOIN conversation_participants p ON p.conversation_id = c.id
            WHERE p.user_id = :uid
            ORDER BY c.updated_at DESC
            """,
            {"uid": uid}
        )

        for conv in conversations:
            conv["other_user"] = fetch_one(
                db,
                """
                SELECT u.id, u.name, u.email, u.image, u.user_type
                FROM conversation_participants p JOIN users u ON u.id = p.user_id
                WHERE p.conversation_id = :cid AND p.user_id != :uid
                LIMIT 1
                """,
                {"cid": conv["id"], "uid": uid}
            )
            conv["last_message"] = fetch_one(
                db,
                f"""
                SELECT {MESSAGE_COLUMNS} FROM messages m
                WHERE m.conversation_id = :cid
                ORDER BY m.sent_at DESC
                LIMIT 1
                """,
                {"cid": conv["id"]}
            )
            conv["unread_count"] = db.execute(
                text("""
                    SELECT COUNT(*) FROM messages
                    WHERE conversation_id = :cid AND sender_id != :uid AND is_read = :is_read
                """),
                {"cid": conv["id"], "uid": uid, "is_read": False}
            ).scalar()

    return [ConversationSummary(**c) for c in conversations]


@router.post("", response_model=ChatMessageResponse, status_code=201)
async def send_message(data: ChatMessageCreate, user: dict = Depends(get_current_user)):
    """Send a message; the receiver gets a MESSAGE notification."""
    sender_id = user["user_id"]

    with get_db_session() as db:
        receiver_id = _resolve_receiver(db, data.receiver_id)
        if not receiver_id:
            raise HTTPException(status_code=404, detail="Receiver not found")
        if receiver_id == sender_id:
            raise HTTPException(status_code=400, detail="You cannot message yourself")

        now = utcnow()
        conversation_id = _find_conversation(db, sender_id, receiver_id)
        if not conversation_id:
            conversation_id = new_id()
            db.execute(
                text("INSERT INTO conversations (id, created_at, updated_at) VALUES (:id, :now, :now)"),
                {"id": conversation_id, "now": now}
            )
            for participant in (sender_id, receiver_id):
                db.execute(
                    text("""
                        INSERT INTO conversation_participants (id, conversation_id, user_id)
                        VALUES (:id, :cid, :uid)
                    """),
                    {"id": new_id(), "cid": conversation_id, "uid": participant}
                )

        message_id = new_id()
        db.execute(
            text("""
                INSERT INTO messages (id, conversation_id, sender_id, content, is_read, sent_at)
                VALUES (:id, :cid, :sender_id, :content, :is_read, :now)
            """),
            {
                "id": message_id, "cid": conversation_id, "sender_id": sender_id,
                "content": data.content, "is_read": False, "now": now
            }
        )
        db.execute(
            text("UPDATE conversations SET updated_at = :now WHERE id = :id"),
            {"now": now, "id": conversation_id}
        )

        sender_name = user["name"] or user["email"]
        preview = data.content if len(data.content) <= 100 else data.content[:100] + "..."
        create_notification(
            db, receiver_id, "MESSAGE", "New Message", f"{sender_name}: {preview}", "/messages"
        )

        message = fetch_one(
            db, f"SELECT {MESSAGE_COLUMNS} FROM messages m WHERE m.id = :id", {"id": message_id}
        )
        message["sender"] = fetch_one(
            db, "SELECT id, name, image FROM users WHERE id = :id", {"id": sender_id}
        )

    logger.debug("Message %s sent in conversation %s", message_id, conversation_id)
    return ChatMessageResponse(**message)


@router.get("/{other_user_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    other_user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    user: dict = Depends(get_current_user)
):
    """Messages with another user, oldest first. Their unread messages are marked read."""
    uid = user["user_id"]

    with get_db_session() as db:
        other_user = fetch_one(
            db, "SELECT id, name, email, image, user_type FROM users WHERE id = :id", {"id": other_user_id}
        )
        if not other_user:
            raise HTTPException(status_code=404, detail="User not found")

        other_user["worker_profile"] = fetch_one(
            db,
            "SELECT id, user_id, first_name, last_name, headline FROM worker_profiles WHERE user_id = :id",
            {"id": other_user_id}
        )
        other_user["business_profile"] = fetch_one(
            db, "SELECT id, company_name FROM business_profiles WHERE user_id = :id", {"id": other_user_id}
        )

        conversation_id = _find_conversation(db, uid, other_user_id)
        messages = []
        if conversation_id:
            db.execute(
                text("""
                    UPDATE messages SET is_read = :read
                    WHERE conversation_id = :cid AND sender_id = :other AND is_read = :unread
                """),
                {"read": True, "unread": False, "cid": conversation_id, "other": other_user_id}
            )
            messages = fetch_all(
                db,
                f"""
                SELECT {MESSAGE_COLUMNS}, u.name AS sender_name, u.image AS sender_image
                FROM messages m JOIN users u ON u.id = m.sender_id
                WHERE m.conversation_id = :cid
                ORDER BY m.sent_at ASC
                LIMIT :limit OFFSET :offset
                """,
                {"cid": conversation_id, "limit": limit, "offset": (page - 1) * limit}
            )
            for m in messages:
                m["sender"] = {"id": m["sender_id"], "name": m.pop("sender_name"), "image": m.pop("sender_image")}

    return ConversationDetailResponse(
        conversation_id=conversation_id,
        messages=[ChatMessageResponse(**m) for m in messages],
        other_user=other_user
    )
