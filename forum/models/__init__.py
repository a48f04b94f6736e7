from forum.models.category import Category
from forum.models.post import Post, Reply
from forum.models.user import User

__all__ = ["Category", "Post", "Reply", "User"]
