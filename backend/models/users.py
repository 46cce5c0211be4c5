# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base


# Staff account; role is "admin" or "user" and e-mails are stored lower-cased
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    role = Column(String(20), nullable=False, default="user")
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
