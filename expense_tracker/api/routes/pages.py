# expense_tracker/api/routes/pages.py
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from expense_tracker.core.sessions import Session
from expense_tracker.api.deps import get_current_session

router = APIRouter(tags=["Pages"])


@router.get("/dashboard")
async def dashboard(session: Session = Depends(get_current_session)):
    """Anonymous visitors go to the login page; the page itself is served by the frontend."""
    if not session.is_authenticated:
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    return {
        "message": f"Welcome, {session.subject.username}",
        "user": {"id": session.subject.user_id, "username": session.subject.username},
    }
