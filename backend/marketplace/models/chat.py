from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from marketplace.database import Base


class ChatRoom(Base):
    __tablename__ = "chat_rooms"
    __table_args__ = (
        CheckConstraint("recruiter_id <> applicant_id"),
        UniqueConstraint("recruiter_id", "applicant_id", "job_announcement_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    recruiter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    applicant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_announcement_id = Column(
        Integer, ForeignKey("job_announcements.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(Text, nullable=False)

    recruiter = relationship("User", foreign_keys=[recruiter_id])
    applicant = relationship("User", foreign_keys=[applicant_id])
    job_announcement = relationship("JobAnnouncement", back_populates="chat_rooms")
    messages = relationship(
        "Message",
        back_populates="chat_room",
        cascade="all, delete-orphan",
        order_by=lambda: [Message.created_at, Message.id],
    )

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.recruiter_id, self.applicant_id)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_room_id = Column(Integer, ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    chat_room = relationship("ChatRoom", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id])
