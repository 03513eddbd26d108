"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).

The table layout is read directly by other systems; column names are fixed.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, Time, DateTime, LargeBinary, ForeignKey
from sqlalchemy.sql import func, expression
from club_api.database import Base


def _image_reference():
    # Weak reference: no ownership, cleared when the image row goes away
    return Column(Integer, ForeignKey("images.id", ondelete="SET NULL"), nullable=True)


class Image(Base):
    """
    Uploaded image stored in the database.
    The binary payload lives in image_data and is left out of every listing.
    """
    __tablename__ = "images"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    image_name = Column(String(255), nullable=False)
    image_data = Column(LargeBinary, nullable=False)
    content_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    category = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Event(Base):
    """Club event. Only published events are listed publicly."""
    __tablename__ = "events"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String(100), nullable=True)
    image_id = _image_reference()
    event_date = Column(Date, nullable=True, index=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location = Column(String(255), nullable=True)
    is_published = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class GalleryItem(Base):
    """Gallery entry pointing at an uploaded image."""
    __tablename__ = "gallery"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    image_id = _image_reference()
    display_order = Column(Integer, nullable=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    gallery_category = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TeamMember(Base):
    """Team member profile. Inactive members are hidden from the public list."""
    __tablename__ = "team_members"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    image_id = _image_reference()
    display_order = Column(Integer, nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
