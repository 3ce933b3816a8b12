"""Shared FastAPI dependencies.

Reusable type aliases and dependency functions that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.cache import ResponseCache, get_response_cache
from catalog.db.session import get_db, get_sessionmaker

DB = Annotated[AsyncSession, Depends(get_db)]
Sessions = Annotated[async_sessionmaker[AsyncSession], Depends(get_sessionmaker)]
ResponseCacheDep = Annotated[ResponseCache, Depends(get_response_cache)]
