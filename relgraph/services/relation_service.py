# relgraph/services/relation_service.py

import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError
from relgraph.models.person import PersonModel
from relgraph.models.relation import RelationModel
from relgraph.schemas.person import Person
from relgraph.schemas.graph import GraphData, GraphNode
from relgraph.schemas.relation import (
    Edge,
    EdgeCreate,
    EdgeDelete,
    EdgeDeleteResponse,
    EdgeMutationResponse,
    PersonRelationsResponse,
    RelationDetail,
)
from relgraph.core.exceptions import (
    EdgeExistsError,
    EdgeNotFoundError,
    GraphServiceError,
    PersonNotFoundError,
    SelfLoopError,
)
from relgraph.core.validation import sanitize_input, validate_id
from relgraph.database import SessionLocal, run_query

logger = logging.getLogger(__name__)

# 방향과 무관하게 같은 두 인물을 잇는 관계
FIND_PAIR_SQL = (
    "SELECT id FROM relations "
    "WHERE (from_person_id = :first AND to_person_id = :second) "
    "OR (from_person_id = :second AND to_person_id = :first) "
    "ORDER BY id"
)
DELETE_PAIR_SQL = (
    "DELETE FROM relations "
    "WHERE (from_person_id = :first AND to_person_id = :second) "
    "OR (from_person_id = :second AND to_person_id = :first)"
)

EDGE_MODES = ("upsert", "strict")


class RelationService:
    """관계(엣지) 관리 및 그래프 조회

    관계는 무방향이다. (A, B)와 (B, A)는 같은 관계로 취급하며 저장된 방향은
    조회/삭제 시 의미가 없다.
    """

    def __init__(self, conflict_mode: str = "upsert", session_factory=SessionLocal):
        if conflict_mode not in EDGE_MODES:
            raise ValueError(f"unknown edge conflict mode: {conflict_mode}")
        self.conflict_mode = conflict_mode
        self.session_factory = session_factory

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return self.session_factory()

    def _parse_pair(self, from_value, to_value) -> Tuple[int, int]:
        from_id = validate_id(from_value)
        to_id = validate_id(to_value)
        if from_id == to_id:
            raise SelfLoopError()
        return from_id, to_id

    async def add_edge(self, edge_data: EdgeCreate) -> EdgeMutationResponse:
        """관계 추가 (이미 있으면 upsert 모드는 출처 갱신, strict 모드는 거절)"""
        from_id, to_id = self._parse_pair(edge_data.from_, edge_data.to)
        source = sanitize_input(edge_data.source) or None

        db = self._get_db()
        try:
            # 양쪽 인물 존재 확인
            for person_id in (from_id, to_id):
                if not db.get(PersonModel, person_id):
                    raise PersonNotFoundError(person_id)

            # 기존 관계 확인 (양방향)
            # 확인과 삽입 사이에 트랜잭션이 없어 동시 요청 시 중복 가능
            existing = self._find_pair(from_id, to_id, db)
            if existing:
                if self.conflict_mode == "strict":
                    raise EdgeExistsError(from_id, to_id)
                return self._update_source(existing, source, db)

            new_relation = RelationModel(
                from_person_id=from_id, to_person_id=to_id, source=source
            )
            db.add(new_relation)
            db.commit()
            db.refresh(new_relation)

            logger.info("관계 추가 성공: id=%s %s-%s", new_relation.id, from_id, to_id)

            return EdgeMutationResponse(
                action="created",
                id=new_relation.id,
                from_=new_relation.from_person_id,
                to=new_relation.to_person_id,
                source=new_relation.source,
                message="관계가 추가되었습니다",
            )

        except GraphServiceError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("관계 추가 실패: %s-%s", from_id, to_id)
            raise
        finally:
            db.close()

    async def update_edge(self, edge_data: EdgeCreate) -> EdgeMutationResponse:
        """기존 관계의 출처 수정 (없으면 404)"""
        from_id, to_id = self._parse_pair(edge_data.from_, edge_data.to)
        source = sanitize_input(edge_data.source) or None

        db = self._get_db()
        try:
            existing = self._find_pair(from_id, to_id, db)
            if not existing:
                raise EdgeNotFoundError(from_id, to_id)
            return self._update_source(existing, source, db)

        except GraphServiceError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("관계 수정 실패: %s-%s", from_id, to_id)
            raise
        finally:
            db.close()

    async def delete_edge(self, edge_data: EdgeDelete) -> EdgeDeleteResponse:
        """관계 삭제 (저장 방향 무관, 인물은 유지)"""
        from_id, to_id = self._parse_pair(edge_data.from_, edge_data.to)

        db = self._get_db()
        try:
            result = run_query(db, DELETE_PAIR_SQL, {"first": from_id, "second": to_id})
            if result.rowcount == 0:
                db.rollback()
                raise EdgeNotFoundError(from_id, to_id)

            db.commit()
            logger.info("관계 삭제 성공: %s-%s (%s행)", from_id, to_id, result.rowcount)

            return EdgeDeleteResponse(deleted_rows=result.rowcount)

        except GraphServiceError:
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("관계 삭제 실패: %s-%s", from_id, to_id)
            raise
        finally:
            db.close()

    async def get_graph(self) -> GraphData:
        """표시용 그래프: 관계가 하나 이상 있는 인물만 노드로 포함"""
        db = self._get_db()
        try:
            persons = db.execute(select(PersonModel).order_by(PersonModel.id)).scalars().all()
            relations = (
                db.execute(select(RelationModel).order_by(RelationModel.id)).scalars().all()
            )

            connected_ids = set()
            for relation in relations:
                connected_ids.add(relation.from_person_id)
                connected_ids.add(relation.to_person_id)

            nodes = [
                GraphNode(id=str(person.id), label=person.name)
                for person in persons
                if person.id in connected_ids
            ]
            edges = [
                Edge(
                    id=str(relation.id),
                    from_=str(relation.from_person_id),
                    to=str(relation.to_person_id),
                    source=relation.source,
                )
                for relation in relations
            ]

            logger.info("그래프 조회: 노드 %s개, 엣지 %s개", len(nodes), len(edges))

            return GraphData(nodes=nodes, edges=edges, total_persons=len(persons))
        finally:
            db.close()

    async def get_person_relations(self, person_id) -> PersonRelationsResponse:
        """인물 한 명의 관계, 이웃, 연결 수 조회"""
        person_id = validate_id(person_id)
        db = self._get_db()
        try:
            person_model = db.get(PersonModel, person_id)
            if not person_model:
                raise PersonNotFoundError(person_id)

            stmt = (
                select(RelationModel)
                .where(
                    or_(
                        RelationModel.from_person_id == person_id,
                        RelationModel.to_person_id == person_id,
                    )
                )
                .order_by(RelationModel.id)
            )
            relations = db.execute(stmt).scalars().all()

            details = []
            neighbor_ids = []
            for relation in relations:
                neighbor_id = (
                    relation.to_person_id
                    if relation.from_person_id == person_id
                    else relation.from_person_id
                )
                details.append(
                    RelationDetail(
                        id=relation.id,
                        from_=relation.from_person_id,
                        to=relation.to_person_id,
                        neighbor_id=neighbor_id,
                        source=relation.source,
                        created_at=relation.created_at,
                        updated_at=relation.updated_at,
                    )
                )
                if neighbor_id not in neighbor_ids:
                    neighbor_ids.append(neighbor_id)

            neighbors = []
            if neighbor_ids:
                neighbor_stmt = (
                    select(PersonModel)
                    .where(PersonModel.id.in_(neighbor_ids))
                    .order_by(PersonModel.name)
                )
                neighbors = [
                    Person.model_validate(neighbor)
                    for neighbor in db.execute(neighbor_stmt).scalars()
                ]

            return PersonRelationsResponse(
                person=Person.model_validate(person_model),
                relations=details,
                neighbors=neighbors,
                degree=len(details),
            )
        finally:
            db.close()

    def _find_pair(self, first_id: int, second_id: int, db: Session) -> Optional[RelationModel]:
        rows: List = run_query(
            db, FIND_PAIR_SQL, {"first": first_id, "second": second_id}
        ).fetchall()
        if not rows:
            return None
        return db.get(RelationModel, rows[0][0])

    def _update_source(
        self, relation: RelationModel, source: Optional[str], db: Session
    ) -> EdgeMutationResponse:
        relation.source = source
        db.commit()
        db.refresh(relation)

        logger.info("관계 출처 갱신: id=%s", relation.id)

        return EdgeMutationResponse(
            action="updated",
            id=relation.id,
            from_=relation.from_person_id,
            to=relation.to_person_id,
            source=relation.source,
            message="기존 관계의 출처가 갱신되었습니다",
        )
