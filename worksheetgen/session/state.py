"""Session state machine.

    idle / ready / error  --load-->      extracting
    extracting            --loaded-->    ready      (--load_failed--> error)
    ready / error         --generate-->  generating (guard: pages loaded)
    generating            --generated--> ready      (--generate_failed--> error)
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    READY = "ready"
    GENERATING = "generating"
    ERROR = "error"


class Event(str, Enum):
    LOAD = "load"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    GENERATE = "generate"
    GENERATED = "generated"
    GENERATE_FAILED = "generate_failed"


Guard = Callable[[], bool]

# (state, event) -> next state
TRANSITIONS: Dict[Tuple[SessionState, Event], SessionState] = {
    (SessionState.IDLE, Event.LOAD): SessionState.EXTRACTING,
    (SessionState.READY, Event.LOAD): SessionState.EXTRACTING,
    (SessionState.ERROR, Event.LOAD): SessionState.EXTRACTING,
    (SessionState.EXTRACTING, Event.LOADED): SessionState.READY,
    (SessionState.EXTRACTING, Event.LOAD_FAILED): SessionState.ERROR,
    (SessionState.READY, Event.GENERATE): SessionState.GENERATING,
    (SessionState.ERROR, Event.GENERATE): SessionState.GENERATING,
    (SessionState.GENERATING, Event.GENERATED): SessionState.READY,
    (SessionState.GENERATING, Event.GENERATE_FAILED): SessionState.ERROR,
}


class StateMachine:
    """Table-driven transitions with optional per-event guards."""

    def __init__(self, guards: Optional[Dict[Event, Guard]] = None):
        self.state = SessionState.IDLE
        self.guards: Dict[Event, Guard] = dict(guards or {})

    def can(self, event: Event) -> bool:
        if (self.state, event) not in TRANSITIONS:
            return False
        guard = self.guards.get(event)
        return guard is None or guard()

    def fire(self, event: Event) -> SessionState:
        if not self.can(event):
            raise InvalidTransitionError(self.state.value, event.value)
        previous = self.state
        self.state = TRANSITIONS[(previous, event)]
        logger.debug("Session %s --%s--> %s", previous.value, event.value, self.state.value)
        return self.state
