# relgraph/models/person.py

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum
from sqlalchemy.dialects import mysql
from sqlalchemy.sql import func
from relgraph.database import Base

GENDERS = ("male", "female", "femboy", "unknown")


class PersonModel(Base):
    __tablename__ = "persons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # MySQL 기본 collation은 대소문자 무시 -> 이름 비교는 바이너리 collation
    name = Column(
        String(255).with_variant(mysql.VARCHAR(255, collation="utf8mb4_bin"), "mysql"),
        nullable=False,
        unique=True,
    )
    description = Column(Text, nullable=True)
    gender = Column(
        Enum(*GENDERS, name="person_gender"), nullable=False, default="unknown"
    )
    created_at = Column(DateTime, default=func.current_timestamp())

    __table_args__ = {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"}

    def __repr__(self):
        return f"<PersonModel(id={self.id}, name='{self.name}')>"
