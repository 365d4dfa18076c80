"""
Filter options for listing people.

Each field is either ``None`` (no constraint) or a value to match.
An exact ``age`` takes precedence over ``min_age``/``max_age``.
"""

from typing import Optional

from pydantic import BaseModel, Field


class FilterOptions(BaseModel):
    name: Optional[str] = None
    surname: Optional[str] = None
    patronymic: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, description="Exact age")
    min_age: Optional[int] = Field(None, ge=0, description="Age from, inclusive")
    max_age: Optional[int] = Field(None, ge=0, description="Age to, inclusive")
    gender: Optional[str] = Field(None, examples=["male"])
    nationality: Optional[str] = Field(None, examples=["RU"])
