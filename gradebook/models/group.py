"""
Grupos y estudiantes tal como los consume el motor de agregación
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Student(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    tutor_name: Optional[str] = None
    tutor_phone: Optional[str] = None


class Group(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    subject: str
    students: List[Student] = Field(default_factory=list)
    semester: Optional[str] = None
    group_name: Optional[str] = None
    facilitator: Optional[str] = None
