"""Centralized dependency type aliases for FastAPI routes.

Domain-specific dependencies (current user, services) live next to their
domain; this module holds the infrastructure ones.
"""

from typing import Annotated

from fastapi import Depends
from pymongo.database import Database

from cocoon.core.email import EmailService, get_email_service
from cocoon.core.settings import Settings, get_settings
from cocoon.db.mongo import get_database

# Application database
DatabaseDep = Annotated[Database, Depends(get_database)]

# Application settings
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Transactional email
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
