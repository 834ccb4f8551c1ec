# relgraph/models/person_background.py

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from relgraph.database import Base


class PersonBackgroundModel(Base):
    __tablename__ = "person_backgrounds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(
        Integer, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    birth_year = Column(Integer, nullable=True)
    body = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.current_timestamp())
    updated_at = Column(
        DateTime, default=func.current_timestamp(), onupdate=func.current_timestamp()
    )

    __table_args__ = {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"}

    def __repr__(self):
        return f"<PersonBackgroundModel(person_id={self.person_id}, birth_year={self.birth_year})>"
