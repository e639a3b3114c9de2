from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from marketplace.database import Base


class JobAnnouncement(Base):
    __tablename__ = "job_announcements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(Text, nullable=False)
    company_name = Column(Text, nullable=False)
    location = Column(Text)
    description = Column(Text)
    salary_range = Column(Text)
    picture_file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"))
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    owner = relationship("User", foreign_keys=[owner_id])
    picture = relationship("FileItem", foreign_keys=[picture_file_id])
    applications = relationship(
        "JobApplication", back_populates="announcement", cascade="all, delete-orphan"
    )
    chat_rooms = relationship(
        "ChatRoom", back_populates="job_announcement", cascade="all, delete-orphan"
    )
