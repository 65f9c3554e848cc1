from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from taskhub.core.database import Base
from taskhub.core.security import hash_password, check_password


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def set_password(self, password: str, rounds: int):
        self.password_hash = hash_password(password, rounds)

    def verify_password(self, password: str) -> bool:
        return check_password(password, self.password_hash)
