from matchday import db  # noqa: F401 - imported for model imports

from .fixture import Fixture
from .prediction import Prediction
from .user import User

__all__ = [
    "User",
    "Fixture",
    "Prediction",
]
