from sqlalchemy import Column, Integer, String, TIMESTAMP
from datetime import datetime
from schelper.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="scheduler")
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
