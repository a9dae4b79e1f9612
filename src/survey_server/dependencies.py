"""Request-scoped dependencies for the route handlers.

``get_db`` wraps every request in one :func:`survey_db.engine.session_scope`,
so an endpoint's writes commit together after the handler returns and roll
back together if it raises.  The service is built once in the lifespan
handler and read back from ``app.state``.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.engine import session_scope
from survey_runtime.responses import ResponseService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with session_scope() as session:
        yield session


def get_service(request: Request) -> ResponseService:
    return request.app.state.service
