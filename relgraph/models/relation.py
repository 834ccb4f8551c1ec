# relgraph/models/relation.py

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from relgraph.database import Base


class RelationModel(Base):
    __tablename__ = "relations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # 저장 방향은 편의용, 관계 자체는 무방향
    from_person_id = Column(
        Integer, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False
    )
    to_person_id = Column(
        Integer, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False
    )
    source = Column(Text, nullable=True)  # 관계 출처
    created_at = Column(DateTime, default=func.current_timestamp())
    updated_at = Column(
        DateTime, default=func.current_timestamp(), onupdate=func.current_timestamp()
    )

    __table_args__ = (
        Index("ix_relations_pair", "from_person_id", "to_person_id"),
        {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"},
    )

    def __repr__(self):
        return (
            f"<RelationModel(id={self.id}, from={self.from_person_id}, to={self.to_person_id})>"
        )
