"""Create a staff login for the admin dashboard, or reset its password.

Usage: python -m scripts.create_staff_user staff@clinic.example
"""
from config.database import Database
from config.settings import Settings
from services.auth_service import AuthService
import argparse
import asyncio
import getpass
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_staff_user(email: str, password: str):
    settings = Settings()
    db = Database(settings.mongodb_url, settings.database_name)
    try:
        await db.connect()
        await AuthService(db).create_staff_user(email, password)
        logger.info(f"Saved staff user: {email}")
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or reset a staff login")
    parser.add_argument("email")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password must not be empty")

    try:
        asyncio.run(create_staff_user(args.email, password))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
