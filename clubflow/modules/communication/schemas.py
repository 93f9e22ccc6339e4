from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, List
from datetime import datetime

Priority = Literal["low", "normal", "high", "urgent"]


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: str = "general"
    priority: Priority = "normal"
    target_audience: Literal["all", "members", "trainers", "teams"] = "all"
    target_team_ids: Optional[List[int]] = None
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_pinned: bool = False
    is_published: bool = False
    tags: Optional[List[str]] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    priority: Optional[Priority] = None
    target_audience: Optional[Literal["all", "members", "trainers", "teams"]] = None
    target_team_ids: Optional[List[int]] = None
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    tags: Optional[List[str]] = None


class AnnouncementResponse(BaseModel):
    id: int
    club_id: int
    author_id: str
    title: str
    content: str
    category: str
    priority: str = "normal"
    target_audience: str = "all"
    target_team_ids: Optional[List[int]] = None
    published_at: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_pinned: bool = False
    is_published: bool = False
    view_count: Optional[int] = 0
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PinRequest(BaseModel):
    is_pinned: bool = True


class NotificationCreate(BaseModel):
    user_id: str
    type: Literal["message", "announcement", "booking", "payment", "system"] = "system"
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    priority: Priority = "normal"
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    expires_at: Optional[datetime] = None


class NotificationResponse(BaseModel):
    id: int
    club_id: int
    user_id: str
    type: str
    title: str
    content: Optional[str] = None
    priority: str = "normal"
    status: str = "unread"
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    read_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationCount(BaseModel):
    count: int


class MessageCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    recipient_type: Literal["user", "all"] = "user"
    recipient_ids: List[str] = []
    priority: Priority = "normal"

    @model_validator(mode="after")
    def check_recipients(self):
        if self.recipient_type == "user" and not self.recipient_ids:
            raise ValueError("recipient_ids is required for direct messages")
        return self


class MessageReply(BaseModel):
    content: str = Field(..., min_length=1)
    subject: Optional[str] = None


class MessageRecipientResponse(BaseModel):
    id: int
    message_id: int
    recipient_type: str
    recipient_id: Optional[str] = None
    status: str = "sent"
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    id: int
    club_id: int
    sender_id: str
    subject: Optional[str] = None
    content: str
    message_type: str = "direct"
    priority: str = "normal"
    status: str = "sent"
    thread_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    recipients: List[MessageRecipientResponse] = []
    replies: List["MessageResponse"] = []
    reply_count: int = 0
    is_read: bool = False

    class Config:
        from_attributes = True


class CommunicationStats(BaseModel):
    total_messages: int = 0
    unread_messages: int = 0
    total_announcements: int = 0
    unread_notifications: int = 0
    recent_activity: int = 0


class ReadAllResponse(BaseModel):
    updated: int


MessageResponse.model_rebuild()
