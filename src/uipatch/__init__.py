"""uipatch - Streamed UI patches reconciled into a live element tree."""

from .adapters import (
    # Types for custom adapters
    Adapter,
    # Main class (scoped API) - all utilities accessible via Adapters.*
    Adapters,
    ChunkPassthroughAdapter,
    HttpxResponseAdapter,
    OpenAIAdapter,
)
from .config import PlaybackConfig, TransportConfig
from .errors import (
    # Error (with .is_cancellation())
    Error,
    ErrorCode,
    ErrorContext,
    TransportError,
)
from .events import EventBus, ObservabilityEvent, ObservabilityEventType
from .framer import LineFramer, frame_lines
from .logging import enable_debug
from .parser import Patch, PatchOp, parse_patch
from .playback import PlaybackCallbacks, PlaybackEngine
from .prompt import MAX_PROMPT_LENGTH, SYSTEM_PROMPT, build_messages, sanitize_prompt
from .reducer import apply_patch, apply_patches
from .script import CONTACT_FORM_SCRIPT, SIMULATION_PROMPT, Stage
from .session import Session, SessionCallbacks, SessionController, reconcile
from .state import SessionState
from .transports import HttpTransport, openai_transport
from .tree import (
    WAITING_PLACEHOLDER,
    Element,
    Tree,
    is_ready,
    resolve_children,
    root_element,
    tree_to_json,
    walk,
)
from .types import Mode, Phase, SessionStatus, Transport, Update
from .version import __version__
from .workbench import Workbench

__all__ = [
    # Version
    "__version__",
    # Tree
    "Element",
    "Tree",
    "WAITING_PLACEHOLDER",
    "root_element",
    "is_ready",
    "resolve_children",
    "walk",
    "tree_to_json",
    # Patches
    "Patch",
    "PatchOp",
    "parse_patch",
    "apply_patch",
    "apply_patches",
    # Framing
    "LineFramer",
    "frame_lines",
    # Adapters
    "Adapter",
    "Adapters",
    "OpenAIAdapter",
    "HttpxResponseAdapter",
    "ChunkPassthroughAdapter",
    # Transports
    "Transport",
    "HttpTransport",
    "openai_transport",
    "MAX_PROMPT_LENGTH",
    "SYSTEM_PROMPT",
    "sanitize_prompt",
    "build_messages",
    # Sessions
    "Session",
    "SessionCallbacks",
    "SessionController",
    "SessionState",
    "SessionStatus",
    "Update",
    "reconcile",
    # Playback
    "Stage",
    "CONTACT_FORM_SCRIPT",
    "SIMULATION_PROMPT",
    "PlaybackEngine",
    "PlaybackCallbacks",
    "Phase",
    # Workbench
    "Workbench",
    "Mode",
    # Config
    "PlaybackConfig",
    "TransportConfig",
    # Errors
    "Error",
    "ErrorCode",
    "ErrorContext",
    "TransportError",
    # Events
    "EventBus",
    "ObservabilityEvent",
    "ObservabilityEventType",
    # Debug
    "enable_debug",
]
