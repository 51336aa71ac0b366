"""
Database Seed Data Module

Catalogue rows every deployment needs: plans, pricing cards, role intel,
module cards and the root superadmin. Existing rows are left untouched.
Run with: python -m dintask.db.seed_data
"""
import asyncio
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.config import settings
from dintask.core.database import AsyncSessionLocal, init_db
from dintask.db.defaults import FREE_PLAN, PAID_PLANS, PRICING_PLANS, SYSTEM_INTEL, TACTICAL_MODULES
from dintask.models.accounts import SuperAdmin, SuperAdminRole
from dintask.models.billing import Plan, PricingPlan
from dintask.models.content import SystemIntel, TacticalModule


async def seed_plans(db: AsyncSession) -> List[Plan]:
    created = []
    for data in [FREE_PLAN] + PAID_PLANS:
        result = await db.execute(select(Plan).where(Plan.name == data["name"]))
        if result.scalars().first():
            continue
        plan = Plan(**data)
        db.add(plan)
        created.append(plan)
    print(f"Created {len(created)} plans")
    return created


async def seed_pricing_plans(db: AsyncSession) -> List[PricingPlan]:
    existing = (await db.execute(select(PricingPlan))).scalars().first()
    if existing:
        return []
    cards = [PricingPlan(**data) for data in PRICING_PLANS]
    db.add_all(cards)
    print(f"Created {len(cards)} pricing cards")
    return cards


async def seed_system_intel(db: AsyncSession) -> List[SystemIntel]:
    created = []
    for data in SYSTEM_INTEL:
        result = await db.execute(select(SystemIntel).where(SystemIntel.role == data["role"]))
        if result.scalars().first():
            continue
        intel = SystemIntel(**data)
        db.add(intel)
        created.append(intel)
    print(f"Created {len(created)} system intel entries")
    return created


async def seed_tactical_modules(db: AsyncSession) -> List[TacticalModule]:
    created = []
    for data in TACTICAL_MODULES:
        result = await db.execute(select(TacticalModule).where(TacticalModule.module_id == data["module_id"]))
        if result.scalars().first():
            continue
        module = TacticalModule(**data)
        db.add(module)
        created.append(module)
    print(f"Created {len(created)} tactical modules")
    return created


async def seed_superadmin(db: AsyncSession):
    if not settings.SUPERADMIN_EMAIL or not settings.SUPERADMIN_PASSWORD:
        print("SUPERADMIN_EMAIL/SUPERADMIN_PASSWORD not set, skipping superadmin")
        return None

    result = await db.execute(select(SuperAdmin).where(SuperAdmin.email == settings.SUPERADMIN_EMAIL))
    if result.scalars().first():
        return None

    root = SuperAdmin(
        name="Super Admin",
        email=settings.SUPERADMIN_EMAIL,
        role=SuperAdminRole.SUPERADMIN.value,
    )
    root.set_password(settings.SUPERADMIN_PASSWORD)
    db.add(root)
    print(f"Created superadmin {settings.SUPERADMIN_EMAIL}")
    return root


# ==================== Main Seed Function ====================

async def seed_all():
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            await seed_plans(db)
            await seed_pricing_plans(db)
            await seed_system_intel(db)
            await seed_tactical_modules(db)
            await seed_superadmin(db)

            await db.commit()
            print("=" * 50)
            print("Database seeding completed successfully!")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(seed_all())
