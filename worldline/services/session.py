"""Per-project interactive sessions: one viewport, controller and event log each."""

from worldline.logging import get_logger
from worldline.services.event_log import EventLog
from worldline.services.interaction import InteractionController
from worldline.services.viewport import ViewportMapper

logger = get_logger('services.session')


class TimelineSession:
    """Viewport and pointer state for one open project."""

    def __init__(self, project_id: str, log: EventLog | None = None):
        self.project_id = project_id
        self.log = log or EventLog()
        self.viewport = ViewportMapper()
        self.controller = InteractionController(self.viewport, self.log)

    def replace_log(self, log: EventLog) -> None:
        """Swap in a fresh snapshot; an active drag keeps its own candidate times."""
        self.log = log
        self.controller.log = log


class SessionRegistry:
    """In-memory sessions keyed by project id, created on first use."""

    def __init__(self):
        self._sessions: dict[str, TimelineSession] = {}

    def get(self, project_id: str) -> TimelineSession:
        session = self._sessions.get(project_id)
        if session is None:
            session = TimelineSession(project_id)
            self._sessions[project_id] = session
            logger.debug(f"Opened timeline session for project {project_id[:8]}")
        return session

    def drop(self, project_id: str) -> bool:
        return self._sessions.pop(project_id, None) is not None

    def __contains__(self, project_id: str) -> bool:
        return project_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
