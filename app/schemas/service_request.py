"""Pydantic schemas for project/service requests."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.models.service_request import ServiceType
from app.schemas.base import BaseResponseSchema, BaseCreateSchema


class ServiceRequestCreate(BaseCreateSchema):
    service_type: ServiceType
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    project_type: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    budget: Optional[str] = Field(None, max_length=100)
    timeline: Optional[str] = Field(None, max_length=100)
    requirements: Optional[str] = Field(None, max_length=5000)


class ServiceRequestResponse(BaseResponseSchema):
    id: UUID
    request_number: str
    service_type: str
    name: str
    email: str
    phone: Optional[str] = None
    project_type: str
    description: str
    budget: Optional[str] = None
    timeline: Optional[str] = None
    requirements: Optional[str] = None
    status: str
    created_at: datetime
