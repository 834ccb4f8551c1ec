# relgraph/services/person_service.py

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from relgraph.models.person import PersonModel
from relgraph.models.person_background import PersonBackgroundModel
from relgraph.schemas.person import Person, PersonCreate, PersonCreateResponse
from relgraph.schemas.background import (
    BackgroundUpsert,
    BackgroundUpsertResponse,
    PersonBackground,
)
from relgraph.core.exceptions import (
    BackgroundNotFoundError,
    GraphServiceError,
    PersonExistsError,
    PersonNotFoundError,
    RequestValidationFailed,
)
from relgraph.core.validation import sanitize_input, validate_id
from relgraph.database import SessionLocal

logger = logging.getLogger(__name__)


class PersonService:

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return self.session_factory()

    async def add_person(self, person_data: PersonCreate) -> PersonCreateResponse:
        """인물 추가 (이름 중복 불가, 대소문자 구분)"""
        name = sanitize_input(person_data.name)
        description = sanitize_input(person_data.description or "")
        if not name:
            # 태그만 있던 이름은 정리 후 빈 문자열이 됨
            raise RequestValidationFailed(details=["필수 필드 누락: name"])

        db = self._get_db()
        try:
            # 같은 이름이 이미 있는지 확인
            if self._find_person_by_name(name, db):
                raise PersonExistsError(name)

            new_person = PersonModel(
                name=name, description=description, gender=person_data.gender
            )
            db.add(new_person)
            try:
                db.commit()
            except IntegrityError:
                # 동시 요청으로 unique 제약에 걸린 경우
                db.rollback()
                raise PersonExistsError(name) from None
            db.refresh(new_person)

            logger.info("인물 추가 성공: id=%s name=%s", new_person.id, name)

            return PersonCreateResponse(
                id=new_person.id,
                name=new_person.name,
                description=new_person.description or "",
                gender=new_person.gender,
            )

        except GraphServiceError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("인물 추가 실패: name=%s", name)
            raise
        finally:
            db.close()

    async def get_all_persons(self) -> List[Person]:
        """전체 인물 조회 (연결 여부 무관)"""
        db = self._get_db()
        try:
            stmt = select(PersonModel).order_by(PersonModel.name)
            result = db.execute(stmt)
            return [Person.model_validate(person) for person in result.scalars()]
        finally:
            db.close()

    async def get_background(self, person_id) -> PersonBackground:
        """인물 배경 정보 조회"""
        person_id = validate_id(person_id)
        db = self._get_db()
        try:
            if not db.get(PersonModel, person_id):
                raise PersonNotFoundError(person_id)

            background = self._find_background(person_id, db)
            if not background:
                raise BackgroundNotFoundError(person_id)

            return PersonBackground.model_validate(background)
        finally:
            db.close()

    async def upsert_background(self, data: BackgroundUpsert) -> BackgroundUpsertResponse:
        """배경 정보 저장 (없으면 생성, 있으면 수정)"""
        person_id = validate_id(data.person_id)
        body = sanitize_input(data.body)

        db = self._get_db()
        try:
            if not db.get(PersonModel, person_id):
                raise PersonNotFoundError(person_id)

            background = self._find_background(person_id, db)
            if background:
                background.birth_year = data.birth_year
                background.body = body
                # 값이 같아도 수정 시각은 갱신
                background.updated_at = func.current_timestamp()
                action = "updated"
            else:
                background = PersonBackgroundModel(
                    person_id=person_id, birth_year=data.birth_year, body=body
                )
                db.add(background)
                action = "created"

            db.commit()
            db.refresh(background)

            logger.info("배경 정보 %s: person_id=%s", action, person_id)

            return BackgroundUpsertResponse(
                action=action, background=PersonBackground.model_validate(background)
            )

        except GraphServiceError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("배경 정보 저장 실패: person_id=%s", person_id)
            raise
        finally:
            db.close()

    def _find_person_by_name(self, name: str, db: Session) -> Optional[PersonModel]:
        stmt = select(PersonModel).where(PersonModel.name == name)
        return db.execute(stmt).scalars().first()

    def _find_background(self, person_id: int, db: Session) -> Optional[PersonBackgroundModel]:
        stmt = select(PersonBackgroundModel).where(PersonBackgroundModel.person_id == person_id)
        return db.execute(stmt).scalar_one_or_none()
