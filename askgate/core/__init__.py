"""Core decision model: request parsing, options, state machine and output."""

from .controller import Phase, SelectionController, SelectionState, Transition
from .emitter import OutputEmitter, VerdictAlreadyEmitted
from .options import Option, OptionModel, OptionModelError
from .project import abbreviate_home, derive_project_label
from .request import Request, parse_request, read_request
from .session_log import SessionLogger

__all__ = [
    "OutputEmitter",
    "Option",
    "OptionModel",
    "OptionModelError",
    "Phase",
    "Request",
    "SelectionController",
    "SelectionState",
    "SessionLogger",
    "Transition",
    "VerdictAlreadyEmitted",
    "abbreviate_home",
    "derive_project_label",
    "parse_request",
    "read_request",
]
