"""
Database Schemas for the portfolio admin backend

Each document model maps to one MongoDB collection: Project -> "projects",
Visitor -> "visitors", Contact -> "contacts". Stored and wire field names are
camelCase (fullDescription, userAgent); Python attributes are snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Project
class ProjectCategory(str, Enum):
    NEW = "new"
    RENEWAL = "renewal"
    APP = "app"
    WEB = "web"
    PROPOSAL = "proposal"
    USABILITY = "usability"


class ProjectFields(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )


class Project(ProjectFields):
    id: Optional[str] = None  # external id
    title: str = Field(min_length=1)
    subtitle: Optional[str] = None
    description: str = Field(min_length=1)
    full_description: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = []
    tags: List[str] = []
    category: ProjectCategory
    date: Optional[str] = None
    role: Optional[str] = None
    duration: Optional[str] = None
    team: Optional[str] = None
    achievements: List[str] = []
    link: Optional[str] = None
    featured: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value


class ProjectUpdate(ProjectFields):
    """Partial update; only the fields a client sends are written."""

    title: Optional[str] = Field(default=None, min_length=1)
    subtitle: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=1)
    full_description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    category: Optional[ProjectCategory] = None
    date: Optional[str] = None
    role: Optional[str] = None
    duration: Optional[str] = None
    team: Optional[str] = None
    achievements: Optional[List[str]] = None
    link: Optional[str] = None
    featured: Optional[bool] = None


# Visitor
class Visitor(CamelModel):
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    path: str = "/"
    date: datetime


class VisitRequest(CamelModel):
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    path: Optional[str] = None


# Contact
class Contact(CamelModel):
    name: str
    email: str
    message: str
    read: bool = False

    @field_validator("name", "email", "message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


# Auth
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
