from .user import User, UserRole
from .post import Post, PostStatus
