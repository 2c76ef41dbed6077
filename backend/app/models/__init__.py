"""
Inkwell Backend: ORM Models
===========================

Importing this package registers every mapped class with `Base.metadata`,
so string-based relationship targets ("Post", "Category", ...) resolve no
matter which model module is imported first.
"""

from app.models.category import Category, PostCategory
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User

__all__ = ["Category", "Comment", "Post", "PostCategory", "User"]
