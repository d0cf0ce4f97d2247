"""Lead-capture intake API router (public forms)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.schemas.inquiry import InquiryIntakeResponse, RentalInquiryCreate, SalesInquiryCreate
from app.services.intake_service import capture_inquiry

router = APIRouter(prefix="/api/v1/inquiries", tags=["inquiries"])


@router.post(
    "/sales",
    response_model=InquiryIntakeResponse,
    summary="Submit a buyer inquiry with financing details",
)
async def submit_sales_inquiry(
    body: SalesInquiryCreate,
    db: AsyncSession = Depends(get_db),
) -> InquiryIntakeResponse:
    result = await capture_inquiry(db, body)
    return InquiryIntakeResponse(**vars(result))


@router.post(
    "/rental",
    response_model=InquiryIntakeResponse,
    summary="Submit a rental inquiry",
)
async def submit_rental_inquiry(
    body: RentalInquiryCreate,
    db: AsyncSession = Depends(get_db),
) -> InquiryIntakeResponse:
    result = await capture_inquiry(db, body)
    return InquiryIntakeResponse(**vars(result))
