from marketplace.models.user import User
from marketplace.models.file import FileItem
from marketplace.models.announcement import JobAnnouncement
from marketplace.models.application import JobApplication
from marketplace.models.chat import ChatRoom, Message

__all__ = ["User", "FileItem", "JobAnnouncement", "JobApplication", "ChatRoom", "Message"]
