from sqlalchemy import Column, String, Integer

from app.db.session import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
