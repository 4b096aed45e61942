from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from core.logging_config import get_logger
from db.database import get_async_session, Organization as OrganizationModel
from schemas.organizations import OrganizationOnboarding, OrganizationRead, OrganizationUpsert

router = APIRouter()
logger = get_logger("organizations")


async def get_organization_or_404(db: AsyncSession, organization_id: UUID) -> OrganizationModel:
    res = await db.execute(select(OrganizationModel).where(OrganizationModel.id == organization_id))
    org = res.scalar_one_or_none()
    if not org:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return org


@router.post("/", response_model=OrganizationRead)
async def upsert_organization(
    payload: OrganizationUpsert,
    db: AsyncSession = Depends(get_async_session),
):
    """Create the organization for an external org id, or refresh its name/slug."""
    res = await db.execute(
        select(OrganizationModel).where(OrganizationModel.clerk_org_id == payload.clerk_org_id)
    )
    org = res.scalar_one_or_none()

    slug_owner = (
        await db.execute(select(OrganizationModel).where(OrganizationModel.slug == payload.slug))
    ).scalar_one_or_none()
    if slug_owner and (org is None or slug_owner.id != org.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slug already in use")

    if org:
        org.name = payload.name
        org.slug = payload.slug
    else:
        org = OrganizationModel(clerk_org_id=payload.clerk_org_id, name=payload.name, slug=payload.slug)
        db.add(org)
        logger.info("organization created clerk_org_id=%s slug=%s", payload.clerk_org_id, payload.slug)

    await db.commit()
    await db.refresh(org)
    return OrganizationRead(**org.to_schema)


@router.get("/by-slug/{slug}", response_model=OrganizationRead)
async def get_organization_by_slug(slug: str, db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(OrganizationModel).where(OrganizationModel.slug == slug))
    org = res.scalar_one_or_none()
    if not org:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return OrganizationRead(**org.to_schema)


@router.get("/by-clerk-id/{clerk_org_id}", response_model=OrganizationRead)
async def get_organization_by_clerk_id(clerk_org_id: str, db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(OrganizationModel).where(OrganizationModel.clerk_org_id == clerk_org_id))
    org = res.scalar_one_or_none()
    if not org:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return OrganizationRead(**org.to_schema)


@router.get("/{organization_id}", response_model=OrganizationRead)
async def get_organization(organization_id: UUID, db: AsyncSession = Depends(get_async_session)):
    org = await get_organization_or_404(db, organization_id)
    return OrganizationRead(**org.to_schema)


@router.patch("/{organization_id}/onboarding", response_model=OrganizationRead)
async def complete_onboarding(
    organization_id: UUID,
    payload: OrganizationOnboarding,
    db: AsyncSession = Depends(get_async_session),
):
    org = await get_organization_or_404(db, organization_id)

    data = payload.model_dump(exclude_unset=True)
    for key, value in data.items():
        setattr(org, key, value)
    org.is_onboarded = True

    await db.commit()
    await db.refresh(org)
    return OrganizationRead(**org.to_schema)
