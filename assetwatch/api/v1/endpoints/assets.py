"""Asset endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.api.deps import get_current_user
from assetwatch.core.database import get_db
from assetwatch.models.asset import Asset, AssetType
from assetwatch.models.user import User
from assetwatch.schemas.asset import AssetCreate, AssetResponse, AssetUpdate, HistoricalPriceResponse
from assetwatch.services.notification_service import notification_service

router = APIRouter()


async def _get_owned_asset(db: AsyncSession, asset_id: UUID, user: User) -> Asset:
    result = await db.execute(
        select(Asset).where(
            Asset.id == asset_id,
            Asset.user_id == user.id,
        )
    )
    asset = result.scalar_one_or_none()

    if not asset:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset not found",
        )
    return asset


@router.get("/", response_model=List[AssetResponse])
async def list_assets(
    asset_type: AssetType = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[AssetResponse]:
    """List all assets for the current user, optionally filtered by class."""
    query = select(Asset).where(Asset.user_id == current_user.id)
    if asset_type:
        query = query.where(Asset.asset_type == asset_type)

    result = await db.execute(query.order_by(Asset.created_at, Asset.id))
    return result.scalars().all()


@router.post("/", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset_in: AssetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    """Create a new asset."""
    if asset_in.asset_type == AssetType.CRYPTO:
        duplicate = Asset.symbol == asset_in.symbol
    else:
        duplicate = Asset.collection_name == asset_in.collection_name

    existing_result = await db.execute(
        select(Asset).where(Asset.user_id == current_user.id, duplicate)
    )
    if existing_result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Asset already exists",
        )

    asset = Asset(user_id=current_user.id, **asset_in.model_dump(exclude_none=True))

    db.add(asset)
    await db.commit()
    await db.refresh(asset)
    return asset


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(
    asset_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    """Get a specific asset."""
    return await _get_owned_asset(db, asset_id, current_user)


@router.get("/{asset_id}/history", response_model=List[HistoricalPriceResponse])
async def get_asset_history(
    asset_id: UUID,
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[HistoricalPriceResponse]:
    """Recorded prices of an asset, newest first."""
    await _get_owned_asset(db, asset_id, current_user)
    return await notification_service.get_asset_history(db, asset_id, limit=limit)


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: UUID,
    asset_in: AssetUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    """Update an asset."""
    asset = await _get_owned_asset(db, asset_id, current_user)

    if asset_in.trait_price is not None and asset.asset_type != AssetType.NFT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="trait_price only applies to NFT assets",
        )
    if asset_in.full_name is not None and asset.asset_type != AssetType.CRYPTO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="full_name only applies to crypto assets",
        )

    update_data = asset_in.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(asset, field, value)

    await db.commit()
    await db.refresh(asset)
    return asset


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(
    asset_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an asset. Its recorded price history is kept."""
    asset = await _get_owned_asset(db, asset_id, current_user)
    await db.delete(asset)
    await db.commit()
