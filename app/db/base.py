# Import all models here so Alembic and create_all can see them
from app.db.session import Base

from app.modules.user_management.models.user import User
from app.modules.categories.models.category import Category
from app.modules.posts.models.post import Post
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.moderation.models.site_settings import SiteSettings
