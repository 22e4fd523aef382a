from pydantic import BaseModel


class StudentResponse(BaseModel):
    id: int  # student_profiles.id
    user_id: int
    class_id: int
    first_name: str
    last_name: str
    email: str


class StudentClassUpdate(BaseModel):
    class_id: int
