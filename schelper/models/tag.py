from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship
from schelper.database import Base

class_tags = Table(
    "class_tags",
    Base.metadata,
    Column("class_id", Integer, ForeignKey("class_properties.class_id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    properties = relationship("ClassProperty", secondary=class_tags, back_populates="tags")
