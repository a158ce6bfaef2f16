from sqlalchemy import Column, Integer, String, ForeignKey, JSON
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship
from schelper.database import Base
from schelper.models.tag import class_tags


class ClassProperty(Base):
    """Editable scheduling data of a class (one row per class)."""

    __tablename__ = "class_properties"

    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)

    class_status = Column(String(50), default="")

    # "HH:MM" 24h, "" when unscheduled
    start_time = Column(String(5), default="")
    end_time = Column(String(5), default="")

    room = Column(String(50), default="")
    facility_id = Column(String(50), default="")

    # ["Mon", "Wed", ...] in week order
    days = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    instructor_email = Column(String(255), default="")
    instructor_name = Column(String(255), default="")

    total_enrolled = Column(Integer)
    total_waitlisted = Column(Integer)

    class_data = relationship("ClassData", back_populates="properties")
    tags = relationship("Tag", secondary=class_tags, back_populates="properties", order_by="Tag.name")

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]
