"""Service Request Service for project/service enquiries."""
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.service_request import ServiceRequest, ServiceRequestStatus
from app.schemas.service_request import ServiceRequestCreate

logger = logging.getLogger(__name__)


class ServiceRequestService:
    """Service for service request operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def generate_request_number(self) -> str:
        """Generate request number: SR-YYYYMMDD-XXXX"""
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        prefix = f"SR-{today}-"

        stmt = select(func.count(ServiceRequest.id)).where(
            ServiceRequest.request_number.like(f"{prefix}%")
        )
        count = (await self.db.execute(stmt)).scalar() or 0
        return f"{prefix}{(count + 1):04d}"

    async def submit_service_request(self, data: ServiceRequestCreate) -> ServiceRequest:
        """Persist a new enquiry. The caller dispatches projectRequest afterwards."""
        service_request = ServiceRequest(
            request_number=await self.generate_request_number(),
            service_type=data.service_type.value,
            name=data.name,
            email=str(data.email),
            phone=data.phone,
            project_type=data.project_type,
            description=data.description,
            budget=data.budget,
            timeline=data.timeline,
            requirements=data.requirements,
            status=ServiceRequestStatus.NEW.value,
        )
        self.db.add(service_request)
        await self.db.commit()

        logger.info(
            f"Service request {service_request.request_number} submitted "
            f"({service_request.service_type}) by {service_request.email}"
        )
        return service_request

    async def get_service_request(self, request_id: uuid.UUID) -> Optional[ServiceRequest]:
        result = await self.db.execute(
            select(ServiceRequest).where(ServiceRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def get_service_requests(
        self,
        status: Optional[str] = None,
        service_type: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[ServiceRequest], int, int]:
        """Get paginated list of service requests."""
        query = select(ServiceRequest)
        count_query = select(func.count(ServiceRequest.id))
        if status:
            query = query.where(ServiceRequest.status == status)
            count_query = count_query.where(ServiceRequest.status == status)
        if service_type:
            query = query.where(ServiceRequest.service_type == service_type)
            count_query = count_query.where(ServiceRequest.service_type == service_type)

        total = (await self.db.execute(count_query)).scalar() or 0
        query = query.order_by(ServiceRequest.created_at.desc()).offset((page - 1) * size).limit(size)
        items = list((await self.db.execute(query)).scalars().all())
        pages = math.ceil(total / size) if total else 1
        return items, total, pages
