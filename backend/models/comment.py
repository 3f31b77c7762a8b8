"""Comment model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from backend.database import Base


class Comment(Base):
    """A user's rating of a professor. One per (professor, author) pair."""
    __tablename__ = "comments"
    __table_args__ = (
        UniqueConstraint("professor_id", "user_id", name="uq_comments_professor_user"),
    )

    id = Column(Integer, primary_key=True)
    professor_id = Column(Integer, ForeignKey("professors.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    user_name = Column(String, nullable=False)  # snapshot at creation
    rating = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
