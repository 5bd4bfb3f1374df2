"""Host listing API routes — CRUD plus pricing and availability rules.

Every route is scoped to listings the authenticated host owns; anything else
is reported as 404.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_db
from app.models.availability import BlockedDate, SpecialPricing
from app.models.listing import Listing
from app.models.user import User
from app.pricing import validate_config
from app.schemas.auth import MessageResponse
from app.schemas.listing import (
    BlockedDateCreate,
    BlockedDateResponse,
    BonusHoursOfferSchema,
    DurationDiscountsResponse,
    DurationDiscountsUpdate,
    DurationTierSchema,
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
    SaleUpdate,
    SpecialPricingCreate,
    SpecialPricingResponse,
)
from app.services.listing_service import ListingConfigError, build_pricing_config, get_host_listing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_owned_listing(listing_id: uuid.UUID, host: User, db: AsyncSession) -> Listing:
    """Fetch a listing owned by ``host`` or raise 404."""
    listing = await get_host_listing(db, listing_id, host)
    if listing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )
    return listing


def _ensure_quotable(listing: Listing) -> None:
    """Reject a change that leaves the listing with pricing the engine refuses."""
    try:
        failure = validate_config(build_pricing_config(listing))
    except ListingConfigError as exc:
        failure_message = exc.message
    else:
        if failure is None:
            return
        failure_message = failure.message
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=failure_message,
    )


def _discounts_response(listing: Listing) -> DurationDiscountsResponse:
    offer = listing.bonus_hours_offer
    return DurationDiscountsResponse(
        listing_id=listing.id,
        hourly_rate=listing.hourly_rate,
        tiers=[DurationTierSchema(**tier) for tier in listing.duration_discounts or []],
        bonus_hours_offer=BonusHoursOfferSchema(**offer) if offer else None,
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_listing(
    body: ListingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingResponse:
    """Create a listing owned by the authenticated host."""
    listing = Listing(host_id=current_user.id, **body.model_dump())
    _ensure_quotable(listing)
    db.add(listing)
    await db.flush()
    await db.refresh(listing)

    logger.info("Host %s created listing %s", current_user.id, listing.id)
    return ListingResponse.model_validate(listing)


@router.get(
    "",
    response_model=ListingListResponse,
    summary="List listings owned by the current host",
)
async def list_listings(
    status_filter: str | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingListResponse:
    """Return paginated listings belonging to the current host."""
    filters = [Listing.host_id == current_user.id]
    if status_filter is not None:
        filters.append(Listing.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Listing).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Listing).where(*filters).order_by(Listing.created_at.desc()).offset(skip).limit(limit)
    )
    items = list(result.scalars().all())

    return ListingListResponse(
        items=[ListingResponse.model_validate(listing) for listing in items],
        total=total,
    )


@router.get("/{listing_id}", response_model=ListingResponse, summary="Get a listing by ID")
async def get_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    return ListingResponse.model_validate(listing)


@router.put("/{listing_id}", response_model=ListingResponse, summary="Update a listing")
async def update_listing(
    listing_id: uuid.UUID,
    body: ListingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingResponse:
    """Partially update a listing. Only explicitly set fields are changed."""
    listing = await _get_owned_listing(listing_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True)
    min_hours = update_data.get("min_hours", listing.min_hours)
    max_hours = update_data.get("max_hours", listing.max_hours)
    if min_hours > max_hours:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Minimum hours cannot be greater than maximum hours",
        )

    for field, value in update_data.items():
        setattr(listing, field, value)
    _ensure_quotable(listing)

    await db.flush()
    await db.refresh(listing)
    return ListingResponse.model_validate(listing)


@router.delete("/{listing_id}", response_model=MessageResponse, summary="Delete a listing")
async def delete_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> MessageResponse:
    """Delete a listing and cascade-delete its bookings and overrides."""
    listing = await _get_owned_listing(listing_id, current_user, db)
    await db.delete(listing)
    await db.flush()

    logger.info("Host %s deleted listing %s", current_user.id, listing_id)
    return MessageResponse(message="Listing deleted")


# ---------------------------------------------------------------------------
# Duration discounts and bonus hours
# ---------------------------------------------------------------------------


@router.get("/{listing_id}/duration-discounts", response_model=DurationDiscountsResponse)
async def get_duration_discounts(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> DurationDiscountsResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    return _discounts_response(listing)


@router.put("/{listing_id}/duration-discounts", response_model=DurationDiscountsResponse)
async def update_duration_discounts(
    listing_id: uuid.UUID,
    body: DurationDiscountsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> DurationDiscountsResponse:
    """Replace the duration tiers and bonus-hours offer; an empty list clears tiers."""
    listing = await _get_owned_listing(listing_id, current_user, db)

    listing.duration_discounts = [tier.model_dump(mode="json") for tier in body.tiers] or None
    listing.bonus_hours_offer = (
        body.bonus_hours_offer.model_dump(mode="json") if body.bonus_hours_offer else None
    )
    _ensure_quotable(listing)

    await db.flush()
    await db.refresh(listing)
    logger.info("Updated duration discounts on listing %s: %d tier(s)", listing.id, len(body.tiers))
    return _discounts_response(listing)


# ---------------------------------------------------------------------------
# Sale
# ---------------------------------------------------------------------------


@router.put("/{listing_id}/sale", response_model=ListingResponse, summary="Schedule a sale")
async def set_sale(
    listing_id: uuid.UUID,
    body: SaleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    for field, value in body.model_dump().items():
        setattr(listing, field, value)
    _ensure_quotable(listing)

    await db.flush()
    await db.refresh(listing)
    return ListingResponse.model_validate(listing)


@router.delete("/{listing_id}/sale", response_model=ListingResponse, summary="End a sale")
async def clear_sale(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> ListingResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    listing.discount_percent = None
    listing.discount_from = None
    listing.discount_until = None
    listing.discount_reason = None

    await db.flush()
    await db.refresh(listing)
    return ListingResponse.model_validate(listing)


# ---------------------------------------------------------------------------
# Blocked dates
# ---------------------------------------------------------------------------


@router.get("/{listing_id}/blocked-dates", response_model=list[BlockedDateResponse])
async def list_blocked_dates(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> list[BlockedDateResponse]:
    listing = await _get_owned_listing(listing_id, current_user, db)
    result = await db.execute(
        select(BlockedDate).where(BlockedDate.listing_id == listing.id).order_by(BlockedDate.day)
    )
    return [BlockedDateResponse.model_validate(row) for row in result.scalars().all()]


@router.post(
    "/{listing_id}/blocked-dates",
    response_model=BlockedDateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def block_date(
    listing_id: uuid.UUID,
    body: BlockedDateCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BlockedDateResponse:
    """Stop new bookings on a date. Existing bookings are left alone."""
    listing = await _get_owned_listing(listing_id, current_user, db)

    existing = await db.execute(
        select(BlockedDate).where(BlockedDate.listing_id == listing.id, BlockedDate.day == body.day)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Date is already blocked",
        )

    block = BlockedDate(listing_id=listing.id, day=body.day)
    if body.reason:
        block.reason = body.reason
    db.add(block)
    await db.flush()
    await db.refresh(block)
    return BlockedDateResponse.model_validate(block)


@router.delete("/{listing_id}/blocked-dates/{block_id}", response_model=MessageResponse)
async def unblock_date(
    listing_id: uuid.UUID,
    block_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> MessageResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    result = await db.execute(
        select(BlockedDate).where(BlockedDate.id == block_id, BlockedDate.listing_id == listing.id)
    )
    block = result.scalar_one_or_none()
    if block is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blocked date not found",
        )

    await db.delete(block)
    await db.flush()
    return MessageResponse(message="Date unblocked")


# ---------------------------------------------------------------------------
# Special pricing
# ---------------------------------------------------------------------------


@router.get("/{listing_id}/special-pricing", response_model=list[SpecialPricingResponse])
async def list_special_pricing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> list[SpecialPricingResponse]:
    listing = await _get_owned_listing(listing_id, current_user, db)
    result = await db.execute(
        select(SpecialPricing).where(SpecialPricing.listing_id == listing.id).order_by(SpecialPricing.day)
    )
    return [SpecialPricingResponse.model_validate(row) for row in result.scalars().all()]


@router.post(
    "/{listing_id}/special-pricing",
    response_model=SpecialPricingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_special_pricing(
    listing_id: uuid.UUID,
    body: SpecialPricingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> SpecialPricingResponse:
    """Override the hourly rate on one date."""
    listing = await _get_owned_listing(listing_id, current_user, db)

    existing = await db.execute(
        select(SpecialPricing).where(SpecialPricing.listing_id == listing.id, SpecialPricing.day == body.day)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Special pricing already set for this date",
        )

    row = SpecialPricing(listing_id=listing.id, **body.model_dump())
    db.add(row)
    await db.flush()
    await db.refresh(row)
    return SpecialPricingResponse.model_validate(row)


@router.delete("/{listing_id}/special-pricing/{pricing_id}", response_model=MessageResponse)
async def remove_special_pricing(
    listing_id: uuid.UUID,
    pricing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> MessageResponse:
    listing = await _get_owned_listing(listing_id, current_user, db)
    result = await db.execute(
        select(SpecialPricing).where(SpecialPricing.id == pricing_id, SpecialPricing.listing_id == listing.id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Special pricing not found",
        )

    await db.delete(row)
    await db.flush()
    return MessageResponse(message="Special pricing removed")
