from dataclasses import dataclass
from typing import Optional

from config.defaults import UNASSIGNED_GROUP


@dataclass
class Student:
    student_id: str
    name: str = ""
    class_group: Optional[str] = None  # e.g. "JSS2", None = not in any class

    @property
    def group_key(self) -> str:
        return self.class_group or UNASSIGNED_GROUP
