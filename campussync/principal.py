from enum import Enum
from typing import NamedTuple


class Role(str, Enum):
    ADMIN = 'admin'
    STUDENT = 'student'
    FACULTY = 'faculty'


class Principal(NamedTuple):
    """The authenticated identity behind one request."""
    role: Role
    principal_id: int
    username: str
