"""Blog ORM models: posts and their comments."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cached_api.infrastructure.persistence.database import Base
from cached_api.infrastructure.persistence.models.mixins import DocumentModel


class Blog(DocumentModel, Base):
    """Blog post. Table: blog. tags is a JSON list; reactions maps reaction -> count."""

    __tablename__ = "blog"

    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String, nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    reactions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


class BlogComment(DocumentModel, Base):
    """Comment on a blog post. Deleted with the post."""

    __tablename__ = "blog_comment"

    blog_id: Mapped[str] = mapped_column(
        String, ForeignKey("blog.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
