from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from forum.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)

    posts = relationship("Post", back_populates="category", passive_deletes=True)
