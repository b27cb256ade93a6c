from .controller import WorksheetSession
from .state import Event, SessionState, StateMachine

__all__ = ["WorksheetSession", "Event", "SessionState", "StateMachine"]
