"""
Seed Permissions and Roles Script
This script populates the permissions, roles and role_permissions tables
from admin_rbac.config.permissions_config and promotes the first admin.
Safe to run repeatedly; existing rows are left untouched.

Usage: python -m admin_rbac.scripts.seed_permissions_roles
"""

import asyncio
import logging
import sys

from admin_rbac.database.supabase_client import SupabaseClient
from admin_rbac.config import settings
from admin_rbac.modules.rbac.repository import RBACRepository
from admin_rbac.modules.rbac.seeder import RBACSeeder

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_seed(repository: RBACRepository):
    seeder = RBACSeeder(repository, admin_role_name=settings.admin_role_name)
    return await seeder.seed()


async def _main() -> None:
    supabase = await SupabaseClient.get_service_client()
    logger.info("Starting permissions and roles seeding...")
    summary = await run_seed(RBACRepository(supabase))
    logger.info("Seeding completed successfully!")
    logger.info(f"Total: {summary.permissions} permissions, {summary.roles} roles processed")
    if summary.promoted_user_id:
        logger.info(f"Promoted {summary.promoted_user_id} to super admin")


def main():
    """Main function to seed permissions and roles"""
    try:
        asyncio.run(_main())
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
