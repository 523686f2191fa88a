"""
Purpose: Transition table for the navigation lifecycle.
What it does:
Maps (current state, command) -> next state:

STOPPED/RUNNING/PAUSED --start--> RUNNING
RUNNING --pause--> PAUSED
PAUSED --resume--> RUNNING
any --stop--> STOPPED
RUNNING --complete--> STOPPED (engine-driven)

An inapplicable command maps to None. The controller treats None as a no-op,
never as an error.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from .models import NavigationState


class NavigationCommand(str, Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    COMPLETE = "complete"


_S = NavigationState
_C = NavigationCommand

TRANSITIONS: Dict[Tuple[NavigationState, NavigationCommand], NavigationState] = {
    (_S.STOPPED, _C.START): _S.RUNNING,
    (_S.RUNNING, _C.START): _S.RUNNING,
    (_S.PAUSED, _C.START): _S.RUNNING,

    (_S.RUNNING, _C.PAUSE): _S.PAUSED,
    (_S.PAUSED, _C.RESUME): _S.RUNNING,

    (_S.STOPPED, _C.STOP): _S.STOPPED,
    (_S.RUNNING, _C.STOP): _S.STOPPED,
    (_S.PAUSED, _C.STOP): _S.STOPPED,

    (_S.RUNNING, _C.COMPLETE): _S.STOPPED,
}


def next_state(current: NavigationState, command: NavigationCommand) -> Optional[NavigationState]:
    """
    Target state for `command` issued in `current`, or None if the command
    does not apply there.
    """
    return TRANSITIONS.get((current, command))
