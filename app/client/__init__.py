"""클라이언트 패키지 — API 클라이언트, 세션 게이트, 버그 보드.

Client package — async API client, session gate and the bug board that
keeps the local cache behind the risk matrix screen.
"""

from app.client.api import BugTrackerClient
from app.client.board import BugBoard
from app.client.session import SessionContext, SessionGate, SessionStore

__all__ = ["BugBoard", "BugTrackerClient", "SessionContext", "SessionGate", "SessionStore"]
