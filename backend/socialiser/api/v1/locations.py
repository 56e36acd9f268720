import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.location import Location
from socialiser.models.user import User
from socialiser.schemas.location import LocationCreate, LocationOut, LocationUpdate

router = APIRouter()


async def _get_owned(db: AsyncSession, location_id: uuid.UUID, owner_id: uuid.UUID) -> Location:
    location = (
        await db.execute(select(Location).where(Location.id == location_id, Location.user_id == owner_id))
    ).scalar_one_or_none()
    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return location


@router.get("", response_model=list[LocationOut], summary="List saved locations, newest first")
async def list_locations(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(Location).where(Location.user_id == current_user.id).order_by(Location.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=LocationOut, status_code=status.HTTP_201_CREATED)
async def create_location(
    body: LocationCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    location = Location(
        user_id=current_user.id,
        name=name,
        type=body.type or "Venue",
        address=body.address,
        description=body.description,
        website=body.website,
    )
    db.add(location)
    await db.commit()
    await db.refresh(location)
    return location


@router.put("/{location_id}", response_model=LocationOut)
async def update_location(
    location_id: uuid.UUID,
    body: LocationUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    location = await _get_owned(db, location_id, current_user.id)
    changes = body.model_dump(exclude_unset=True)
    if "name" in changes:
        name = (changes.pop("name") or "").strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        location.name = name
    if "type" in changes:
        changes["type"] = changes["type"] or "Venue"
    for field, value in changes.items():
        setattr(location, field, value)

    db.add(location)
    await db.commit()
    await db.refresh(location)
    return location


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    location = await _get_owned(db, location_id, current_user.id)
    await db.delete(location)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
