from __future__ import annotations
from enum import StrEnum


class ChangeKind(StrEnum):
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"
