# relgraph/services/__init__.py

from .person_service import PersonService
from .relation_service import RelationService
from .admin_service import AdminService

__all__ = ["PersonService", "RelationService", "AdminService"]
