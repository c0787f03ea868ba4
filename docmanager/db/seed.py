import logging

from sqlalchemy.orm import Session

from docmanager.config import settings
from docmanager.models.user import Role, User
from docmanager.users.service import create_user

logger = logging.getLogger(__name__)


def seed_dev_data(db: Session) -> bool:
    """Create an admin and a regular test account on an empty database."""
    if db.query(User).count() > 0:
        return False

    logger.info("Loading initial data...")
    create_user(
        db,
        username="admin",
        email="admin@docmanager.com",
        password=settings.seed_admin_password,
        first_name="Admin",
        last_name="User",
        roles=(Role.ADMIN, Role.USER),
    )
    logger.info("Created admin user: admin")
    create_user(
        db,
        username="testuser",
        email="test@example.com",
        password=settings.seed_user_password,
        first_name="Test",
        last_name="User",
        roles=(Role.USER,),
    )
    logger.info("Created test user: testuser")
    return True
