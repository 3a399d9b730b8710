# src/backend/schemas/employee.py
from pydantic import BaseModel, field_validator
from typing import Optional


def _required(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class Employee(BaseModel):
    """Stored record; serialized with exactly these keys."""

    id: str
    name: str
    mobile: str
    address: str
    photo: str = ""

    @field_validator("photo", mode="before")
    @classmethod
    def photo_never_null(cls, v: Optional[str]) -> str:
        return v or ""


class EmployeeCreate(BaseModel):
    id: Optional[str]
    name: Optional[str]
    mobile: Optional[str]
    address: Optional[str]

    # mobile digit-count rules live in the UI only
    @field_validator("id", "name", "mobile", "address")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> str:
        return _required(v)

    def to_employee(self, photo: str = "") -> Employee:
        return Employee(
            id=self.id,
            name=self.name,
            mobile=self.mobile,
            address=self.address,
            photo=photo,
        )


class EmployeeUpdate(BaseModel):
    name: Optional[str]
    mobile: Optional[str]
    address: Optional[str]

    @field_validator("name", "mobile", "address")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> str:
        return _required(v)


class EmployeeDeleted(BaseModel):
    success: bool = True
    removed: Employee
