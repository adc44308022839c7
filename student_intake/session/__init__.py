"""Session lifecycle: token storage, role gating and profile refresh."""

from student_intake.session.refresh import ProfileRefresher
from student_intake.session.store import Session, SessionStore, require_role

__all__ = ["ProfileRefresher", "Session", "SessionStore", "require_role"]
