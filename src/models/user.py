"""
User-related Pydantic models
"""

import math
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_age(value):
    if value is None:
        return value
    if not math.isfinite(value):
        raise ValueError("age must be a finite number")
    if value < 0:
        raise ValueError("age must be greater than or equal to 0")
    return value


class UserCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    age: Optional[Union[int, float]] = None
    favoriteFoods: List[str] = Field(default_factory=list)

    @field_validator('age')
    @classmethod
    def validate_age(cls, v):
        return _check_age(v)

    def to_document(self) -> dict:
        """Document to insert; an unset age is left out"""
        return self.model_dump(exclude_none=True)


class UserUpdateRequest(BaseModel):
    """Partial update, only the supplied fields are replaced"""
    name: Optional[str] = None
    age: Optional[Union[int, float]] = None
    favoriteFoods: Optional[List[str]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is None or v == "":
            raise ValueError("name is required")
        return v

    @field_validator('age')
    @classmethod
    def validate_age(cls, v):
        return _check_age(v)

    @field_validator('favoriteFoods')
    @classmethod
    def validate_favorite_foods(cls, v):
        # null clears the list, same as []
        return [] if v is None else v

    def to_updates(self) -> dict:
        return self.model_dump(exclude_unset=True)


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    age: Optional[Union[int, float]] = None
    favoriteFoods: List[str] = Field(default_factory=list)


class UserSummaryResponse(BaseModel):
    """User projection without the age field"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    favoriteFoods: List[str] = Field(default_factory=list)


class UserDeletedResponse(BaseModel):
    message: str
    deletedUser: UserResponse


class UserRemovedResponse(BaseModel):
    message: str
    removedPerson: UserResponse


class UsersDeletedCountResponse(BaseModel):
    message: str
    deletedCount: int
