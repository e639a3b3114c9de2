from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from marketplace.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=False, unique=True)
    hashed_password = Column(Text, nullable=False)
    prefix = Column(Text)
    firstname = Column(Text, nullable=False)
    lastname = Column(Text, nullable=False)
    birth_date = Column(Text)
    address = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    tel_number = Column(Text)
    verified_at = Column(Text)
    is_admin = Column(Boolean, nullable=False, default=False)
    avatar_file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"))
    created_at = Column(Text, nullable=False)

    # users and files reference each other; post_update breaks the flush cycle
    avatar_file = relationship("FileItem", foreign_keys=[avatar_file_id], post_update=True)
