"""
Category model - read-only here, managed by content authoring
"""
from sqlalchemy import Column, String, Integer, TIMESTAMP, func
from quizplay.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20))
    icon = Column(String(100))
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"
