from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from marketplace.database import Base


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (UniqueConstraint("announcement_id", "applicant_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    announcement_id = Column(
        Integer, ForeignKey("job_announcements.id", ondelete="CASCADE"), nullable=False
    )
    applicant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    resume_file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"))
    cover_letter_file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"))
    transcript_file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"))
    note = Column(Text)
    created_at = Column(Text, nullable=False)

    announcement = relationship("JobAnnouncement", back_populates="applications")
    applicant = relationship("User", foreign_keys=[applicant_id])
    resume = relationship("FileItem", foreign_keys=[resume_file_id])
    cover_letter = relationship("FileItem", foreign_keys=[cover_letter_file_id])
    transcript = relationship("FileItem", foreign_keys=[transcript_file_id])
