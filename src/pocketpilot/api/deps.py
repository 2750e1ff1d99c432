"""
FastAPI dependencies (database handle, current owner)
"""
from typing import Iterator

from fastapi import Request

from pocketpilot.database.base import Database
from pocketpilot.database.factories import create_database
from pocketpilot.domain.errors import UnauthorizedError


def get_database() -> Iterator[Database]:
    """One database handle per request on the shared engine, closed after the response."""
    db = create_database(shared=True)
    db.connect()
    try:
        yield db
    finally:
        db.disconnect()


def get_current_owner(request: Request) -> str:
    """
    Owner id of the signed-in user, taken from the session cookie

    Raises:
        UnauthorizedError: if nobody is signed in (rendered as 401)
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise UnauthorizedError("Not authenticated")
    return str(user_id)
