import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.db_types import UUIDType


class ServiceType(str, Enum):
    """Services offered through the project request form."""
    PRINTING_3D = "3d-printing"
    DRONE_SERVICES = "drone-services"
    PROJECT_BUILDING = "project-building"


class ServiceRequestStatus(str, Enum):
    NEW = "new"
    IN_REVIEW = "in_review"
    QUOTED = "quoted"
    CLOSED = "closed"


class ServiceRequest(Base):
    """Project/service enquiry submitted from the storefront."""
    __tablename__ = "service_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    request_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
        comment="SR-YYYYMMDD-NNNN"
    )

    service_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    # Contact
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Project details
    project_type: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    budget: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    timeline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ServiceRequestStatus.NEW.value
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<ServiceRequest(number='{self.request_number}', type='{self.service_type}')>"
