"""
Announcements, notifications and direct messages of a club.

Reads never fail the request: storage errors are logged and an empty
result is returned. Writes raise HTTP 500 on storage errors.
"""
import logging
from datetime import timedelta
from supabase import Client
from fastapi import HTTPException
from typing import Dict, List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import (
    cache_key, invalidate_all_data, invalidate_cross_entity_data, invalidate_entity_data,
)
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.communication.schemas import (
    AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse,
    NotificationCreate, NotificationResponse,
    MessageCreate, MessageReply, MessageResponse, MessageRecipientResponse,
    CommunicationStats,
)

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7
SEARCH_LIMIT = 50


def _announcement_sort_key(row: dict):
    published = parse_timestamp(row.get("published_at") or row.get("created_at"))
    return (bool(row.get("is_pinned")), published.timestamp() if published else 0)


class CommunicationService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    # Announcements

    def list_announcements(self, club_id: int, include_unpublished: bool = False) -> List[AnnouncementResponse]:
        """Pinned announcements first, then newest"""
        try:
            query = self.supabase.table("announcements")\
                .select("*")\
                .eq("club_id", club_id)\
                .is_("deleted_at", "null")
            if not include_unpublished:
                query = query.eq("is_published", True)
            rows = query.execute().data or []
            rows.sort(key=_announcement_sort_key, reverse=True)
            return [AnnouncementResponse(**a) for a in rows]
        except Exception as e:
            logger.error(f"Error getting announcements for club {club_id}: {e}")
            return []

    def _announcement_row(self, club_id: int, announcement_id: int) -> Optional[dict]:
        try:
            return first_row(
                self.supabase.table("announcements")
                .select("*")
                .eq("id", announcement_id)
                .eq("club_id", club_id)
                .is_("deleted_at", "null")
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error getting announcement {announcement_id}: {e}")
            return None

    def get_announcement(self, club_id: int, announcement_id: int) -> AnnouncementResponse:
        row = self._announcement_row(club_id, announcement_id)
        if not row:
            raise HTTPException(status_code=404, detail="Announcement not found")
        return AnnouncementResponse(**row)

    def _notify_members(self, club_id: int, author_id: str, announcement: dict) -> int:
        """Notify active members about a published announcement; failures are only logged"""
        try:
            memberships = self.supabase.table("club_memberships")\
                .select("user_id")\
                .eq("club_id", club_id)\
                .eq("status", "active")\
                .execute()
            rows = [
                {
                    "club_id": club_id,
                    "user_id": m["user_id"],
                    "type": "announcement",
                    "title": f"Neue Ankündigung: {announcement['title']}",
                    "content": announcement.get("content", "")[:200],
                    "priority": announcement.get("priority", "normal"),
                    "status": "unread",
                    "related_entity_type": "announcement",
                    "related_entity_id": announcement["id"],
                }
                for m in memberships.data or []
                if m["user_id"] != author_id
            ]
            if rows:
                self.supabase.table("notifications").insert(rows).execute()
            return len(rows)
        except Exception as e:
            logger.warning(f"Failed to create announcement notifications for club {club_id}: {e}")
            return 0

    def create_announcement(self, club_id: int, author_id: str, data: AnnouncementCreate) -> AnnouncementResponse:
        try:
            row = data.model_dump(mode="json", exclude_none=True)
            row.update({"club_id": club_id, "author_id": author_id})
            if data.is_published:
                row["published_at"] = utcnow().isoformat()
            result = self.supabase.table("announcements").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create announcement")
            announcement = result.data[0]
            if data.is_published:
                self._notify_members(club_id, author_id, announcement)
            invalidate_cross_entity_data(self.cache, club_id, ["announcements", "dashboard"])
            logger.info(f"Announcement {announcement['id']} created in club {club_id}")
            return AnnouncementResponse(**announcement)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _update_announcement(self, club_id: int, announcement_id: int, changes: dict) -> dict:
        if not self._announcement_row(club_id, announcement_id):
            raise HTTPException(status_code=404, detail="Announcement not found")
        changes["updated_at"] = utcnow().isoformat()
        result = self.supabase.table("announcements")\
            .update(changes)\
            .eq("id", announcement_id)\
            .eq("club_id", club_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Announcement not found")
        invalidate_cross_entity_data(self.cache, club_id, ["announcements", "dashboard"])
        return result.data[0]

    def update_announcement(self, club_id: int, announcement_id: int, data: AnnouncementUpdate) -> AnnouncementResponse:
        try:
            row = self._update_announcement(club_id, announcement_id, data.model_dump(mode="json", exclude_unset=True))
            return AnnouncementResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def publish_announcement(self, club_id: int, announcement_id: int, user_id: str) -> AnnouncementResponse:
        try:
            current = self._announcement_row(club_id, announcement_id)
            if not current:
                raise HTTPException(status_code=404, detail="Announcement not found")
            if current.get("is_published"):
                return AnnouncementResponse(**current)
            row = self._update_announcement(
                club_id, announcement_id, {"is_published": True, "published_at": utcnow().isoformat()}
            )
            self._notify_members(club_id, user_id, row)
            logger.info(f"Announcement {announcement_id} published in club {club_id}")
            return AnnouncementResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def pin_announcement(self, club_id: int, announcement_id: int, is_pinned: bool) -> AnnouncementResponse:
        try:
            row = self._update_announcement(club_id, announcement_id, {"is_pinned": is_pinned})
            return AnnouncementResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_announcement(self, club_id: int, announcement_id: int) -> bool:
        try:
            self._update_announcement(club_id, announcement_id, {"deleted_at": utcnow().isoformat()})
            logger.info(f"Announcement {announcement_id} deleted in club {club_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Notifications

    def list_notifications(
        self, club_id: int, user_id: str, status: Optional[str] = None, limit: int = 100
    ) -> List[NotificationResponse]:
        try:
            query = self.supabase.table("notifications")\
                .select("*")\
                .eq("club_id", club_id)\
                .eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            else:
                query = query.neq("status", "dismissed")
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [NotificationResponse(**n) for n in result.data or []]
        except Exception as e:
            logger.error(f"Error getting notifications for user {user_id} in club {club_id}: {e}")
            return []

    def count_unread_notifications(self, club_id: int, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("id")\
                .eq("club_id", club_id)\
                .eq("user_id", user_id)\
                .eq("status", "unread")\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error counting notifications for user {user_id} in club {club_id}: {e}")
            return 0

    def create_notification(self, club_id: int, data: NotificationCreate) -> NotificationResponse:
        try:
            row = data.model_dump(mode="json", exclude_none=True)
            row.update({"club_id": club_id, "status": "unread"})
            result = self.supabase.table("notifications").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create notification")
            invalidate_all_data(self.cache, club_id)
            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_notification_read(self, club_id: int, user_id: str, notification_id: int) -> NotificationResponse:
        try:
            now = utcnow().isoformat()
            result = self.supabase.table("notifications")\
                .update({"status": "read", "read_at": now, "updated_at": now})\
                .eq("id", notification_id)\
                .eq("club_id", club_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            invalidate_all_data(self.cache, club_id)
            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_notifications_read(self, club_id: int, user_id: str) -> int:
        try:
            now = utcnow().isoformat()
            result = self.supabase.table("notifications")\
                .update({"status": "read", "read_at": now, "updated_at": now})\
                .eq("club_id", club_id)\
                .eq("user_id", user_id)\
                .eq("status", "unread")\
                .execute()
            invalidate_all_data(self.cache, club_id)
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_notification(self, club_id: int, user_id: str, notification_id: int) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .eq("club_id", club_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            invalidate_all_data(self.cache, club_id)
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Messages

    def _recipients_by_message(self, message_ids: List[int]) -> Dict[int, List[dict]]:
        if not message_ids:
            return {}
        result = self.supabase.table("message_recipients")\
            .select("*")\
            .in_("message_id", message_ids)\
            .execute()
        by_message: Dict[int, List[dict]] = {}
        for row in result.data or []:
            by_message.setdefault(row["message_id"], []).append(row)
        return by_message

    @staticmethod
    def _can_see(message: dict, recipients: List[dict], user_id: str) -> bool:
        if message["sender_id"] == user_id:
            return True
        return any(
            r["recipient_type"] == "all" or (r["recipient_type"] == "user" and r.get("recipient_id") == user_id)
            for r in recipients
        )

    @staticmethod
    def _is_read(message: dict, recipients: List[dict], user_id: str) -> bool:
        if message["sender_id"] == user_id:
            return True
        return any(r.get("recipient_id") == user_id and r.get("status") == "read" for r in recipients)

    def _visible_messages(self, club_id: int, user_id: str) -> List[MessageResponse]:
        """Top-level messages the user sent or received, newest first, with their replies"""
        result = self.supabase.table("messages")\
            .select("*")\
            .eq("club_id", club_id)\
            .is_("deleted_at", "null")\
            .order("created_at", desc=True)\
            .execute()
        rows = result.data or []
        recipients = self._recipients_by_message([m["id"] for m in rows])

        replies: Dict[int, List[dict]] = {}
        for row in rows:
            if row.get("thread_id"):
                replies.setdefault(row["thread_id"], []).append(row)

        visible = []
        for row in rows:
            if row.get("thread_id"):
                continue
            message_recipients = recipients.get(row["id"], [])
            if not self._can_see(row, message_recipients, user_id):
                continue
            thread = sorted(replies.get(row["id"], []), key=lambda r: r.get("created_at") or "")
            visible.append(MessageResponse(
                **row,
                recipients=[MessageRecipientResponse(**r) for r in message_recipients],
                replies=[MessageResponse(**r) for r in thread],
                reply_count=len(thread),
                is_read=self._is_read(row, message_recipients, user_id),
            ))
        return visible

    def list_messages(self, club_id: int, user_id: str) -> List[MessageResponse]:
        try:
            return self._visible_messages(club_id, user_id)
        except Exception as e:
            logger.error(f"Error getting messages for user {user_id} in club {club_id}: {e}")
            return []

    def get_message(self, club_id: int, user_id: str, message_id: int) -> MessageResponse:
        message = next((m for m in self.list_messages(club_id, user_id) if m.id == message_id), None)
        if not message:
            raise HTTPException(status_code=404, detail="Message not found")
        return message

    def _insert_message(self, row: dict, recipients: List[dict]) -> dict:
        result = self.supabase.table("messages").insert(row).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create message")
        message = result.data[0]
        now = utcnow().isoformat()
        recipient_rows = [{
            "message_id": message["id"],
            "recipient_type": "user",
            "recipient_id": row["sender_id"],
            "status": "sent",
            "delivered_at": now,
        }]
        for recipient in recipients:
            if recipient.get("recipient_id") == row["sender_id"]:
                continue
            recipient_rows.append(dict(recipient, message_id=message["id"], status="sent", delivered_at=now))
        self.supabase.table("message_recipients").insert(recipient_rows).execute()
        return message

    def create_message(self, club_id: int, sender_id: str, data: MessageCreate) -> MessageResponse:
        try:
            if data.recipient_type == "all":
                recipients = [{"recipient_type": "all", "recipient_id": None}]
            else:
                recipients = [{"recipient_type": "user", "recipient_id": rid} for rid in dict.fromkeys(data.recipient_ids)]
            message = self._insert_message({
                "club_id": club_id,
                "sender_id": sender_id,
                "subject": data.subject,
                "content": data.content,
                "message_type": "direct" if data.recipient_type == "user" else "group",
                "priority": data.priority,
                "status": "sent",
            }, recipients)
            invalidate_entity_data(self.cache, club_id, "messages")
            logger.info(f"Message {message['id']} sent in club {club_id}")
            return self.get_message(club_id, sender_id, message["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reply_to_message(self, club_id: int, user_id: str, message_id: int, data: MessageReply) -> MessageResponse:
        try:
            parent = self.get_message(club_id, user_id, message_id)
            reply = self._insert_message({
                "club_id": club_id,
                "sender_id": user_id,
                "subject": data.subject or f"Re: {parent.subject or 'Message'}",
                "content": data.content,
                "message_type": "reply",
                "priority": "normal",
                "status": "sent",
                "thread_id": message_id,
            }, [])
            invalidate_entity_data(self.cache, club_id, "messages")
            return MessageResponse(**reply)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_message_read(self, club_id: int, user_id: str, message_id: int) -> bool:
        try:
            self.get_message(club_id, user_id, message_id)
            now = utcnow().isoformat()
            updated = self.supabase.table("message_recipients")\
                .update({"status": "read", "read_at": now, "updated_at": now})\
                .eq("message_id", message_id)\
                .eq("recipient_id", user_id)\
                .execute()
            if not updated.data:
                self.supabase.table("message_recipients").insert({
                    "message_id": message_id,
                    "recipient_type": "user",
                    "recipient_id": user_id,
                    "status": "read",
                    "read_at": now,
                    "delivered_at": now,
                }).execute()
            invalidate_entity_data(self.cache, club_id, "messages")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_message(self, club_id: int, user_id: str, message_id: int) -> bool:
        """Soft delete; only the sender may delete a message"""
        try:
            message = first_row(
                self.supabase.table("messages")
                .select("id, sender_id")
                .eq("id", message_id)
                .eq("club_id", club_id)
                .is_("deleted_at", "null")
                .limit(1)
                .execute()
            )
            if not message:
                raise HTTPException(status_code=404, detail="Message not found")
            if message["sender_id"] != user_id:
                raise HTTPException(status_code=403, detail="You can only delete your own messages")
            self.supabase.table("messages")\
                .update({"deleted_at": utcnow().isoformat()})\
                .eq("id", message_id)\
                .execute()
            invalidate_entity_data(self.cache, club_id, "messages")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Stats and search

    def _compute_stats(self, club_id: int, user_id: str) -> CommunicationStats:
        messages = self._visible_messages(club_id, user_id)
        announcements = self.list_announcements(club_id)
        since = utcnow() - timedelta(days=RECENT_ACTIVITY_DAYS)
        recent = [
            item for item in [*messages, *announcements]
            if item.created_at and parse_timestamp(item.created_at) >= since
        ]
        return CommunicationStats(
            total_messages=len(messages),
            unread_messages=sum(1 for m in messages if not m.is_read),
            total_announcements=len(announcements),
            unread_notifications=self.count_unread_notifications(club_id, user_id),
            recent_activity=len(recent),
        )

    def get_communication_stats(self, club_id: int, user_id: str) -> CommunicationStats:
        try:
            return self.cache.get_or_set(
                f"{cache_key(club_id, 'communication-stats')}:{user_id}",
                lambda: self._compute_stats(club_id, user_id),
            )
        except Exception as e:
            logger.error(f"Error getting communication stats for club {club_id}: {e}")
            return CommunicationStats()

    def search_messages(self, club_id: int, user_id: str, query: str) -> List[MessageResponse]:
        needle = query.strip().lower()
        if not needle:
            return []
        matches = [
            m for m in self.list_messages(club_id, user_id)
            if needle in (m.subject or "").lower() or needle in m.content.lower()
        ]
        return matches[:SEARCH_LIMIT]

    def search_announcements(self, club_id: int, query: str) -> List[AnnouncementResponse]:
        needle = query.strip().lower()
        if not needle:
            return []
        matches = [
            a for a in self.list_announcements(club_id)
            if needle in a.title.lower() or needle in a.content.lower()
        ]
        return matches[:SEARCH_LIMIT]
