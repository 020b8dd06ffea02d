from datetime import datetime

from .base import WireModel
from .enums import StudentStatus


class Student(WireModel):
    id: str
    full_name: str
    email: str
    phone_number: str = ""
    student_id: str | None = None
    program: str | None = None
    year_of_study: str | None = None
    status: StudentStatus
    created_at: datetime
