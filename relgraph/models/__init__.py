# relgraph/models/__init__.py

from .person import PersonModel
from .relation import RelationModel
from .person_background import PersonBackgroundModel


__all__ = [
    "PersonModel",
    "RelationModel",
    "PersonBackgroundModel",
]
