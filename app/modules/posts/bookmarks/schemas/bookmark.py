from pydantic import BaseModel

class BookmarkToggleResult(BaseModel):
    post_id: str
    bookmarked: bool
