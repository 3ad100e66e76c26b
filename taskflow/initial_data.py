
# taskflow/initial_data.py

import asyncio
import logging
from sqlalchemy.orm import Session
from taskflow.database import SessionLocal, init_db
from taskflow.crud.user import create_user as crud_create_user, get_user_by_email
from taskflow.core.constants import UserRole
from taskflow.core.settings import settings
from taskflow.core.exceptions import UserValidationError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TaskFlow.InitialData")

async def create_initial_admin_user(db: Session) -> None:
    logger.info("Checking if initial admin user needs to be created...")
    admin_email = settings.FIRST_SUPERUSER_EMAIL

    admin_user = get_user_by_email(db, admin_email)
    if not admin_user:
        logger.info(f"Admin user '{admin_email}' not found. Creating...")
        user_data = {
            "name": settings.FIRST_SUPERUSER_NAME,
            "email": admin_email,
            "password": settings.FIRST_SUPERUSER_PASSWORD,
            "role": UserRole.ADMIN,
        }
        try:
            crud_create_user(db=db, data=user_data)
            logger.info(f"Admin user '{admin_email}' created successfully.")
        except UserValidationError as e:
            logger.error(f"Failed to create admin user: {e}")
        except Exception as e:
            logger.error(f"An unexpected error occurred during admin user creation: {e}", exc_info=True)
    else:
        logger.info(f"Admin user '{admin_email}' already exists. No action taken.")

async def main() -> None:
    logger.info("Initializing database schema and initial data (admin user)...")
    init_db()
    db = SessionLocal()
    try:
        await create_initial_admin_user(db)
    finally:
        db.close()
    logger.info("Finished initial data setup.")

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()

    asyncio.run(main())
