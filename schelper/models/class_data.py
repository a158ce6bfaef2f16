from sqlalchemy import Column, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from schelper.database import Base


class ClassData(Base):
    """Fixed identifiers of a class section as they come from the roster."""

    __tablename__ = "classes"
    __table_args__ = (UniqueConstraint("class_num", "session", name="uq_classes_class_num_session"),)

    id = Column(Integer, primary_key=True, index=True)

    catalog_num = Column(String(50), default="")
    class_num = Column(String(50), nullable=False, index=True)
    session = Column(String(100), default="")

    course_subject = Column(String(50), default="")
    course_num = Column(String(50), default="")
    section = Column(String(50), default="")
    title = Column(String(255), default="")
    location = Column(String(100), default="")

    enrollment_cap = Column(Integer)
    waitlist_cap = Column(Integer)

    # relationship
    properties = relationship(
        "ClassProperty",
        back_populates="class_data",
        uselist=False,
        cascade="all, delete-orphan",
    )
