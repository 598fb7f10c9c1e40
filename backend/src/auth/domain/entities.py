from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    READER = "reader"
    ACTOR = "actor"
    AUTHOR = "author"
    EDITOR = "editor"


@dataclass(frozen=True)
class Principal:
    id: str
    display_name: str
    role: Role
    email: str | None = None
