STATE_DIR_NAME = ".focus_stack"
EVENTS_FILE = "events.jsonl"
CURSOR_FILE = "stack.json"
CONFIG_FILE = "config.yaml"

TASK_ID_PREFIX = "T"
BACKLOG_ID_PREFIX = "B"
ID_PAD_WIDTH = 3

TASK_KIND_MAIN = "main"
TASK_KIND_SUB = "sub"

BACKLOG_PENDING = "pending"
BACKLOG_PROMOTED = "promoted"
BACKLOG_DISMISSED = "dismissed"

SHORT_VIEW_MAX_LINES = 5
RESUME_VIEW_MAX_LINES = 6
RESUME_VIEW_MAX_FRAMES = 3
SHORT_VIEW_PROJECT_CHARS = 60
RESUME_VIEW_PROJECT_CHARS = 80
PROJECT_SUMMARY_MAX_CHARS = 100
SESSION_TITLE_MAX_CHARS = 60

DEFAULT_WRITE_TOOL_PATTERNS = ("write", "edit", "patch", "create", "apply", "bash", "shell", "exec", "run")
DEFAULT_SHELL_TOOL_PATTERNS = ("bash", "shell", "exec", "run", "terminal")
DEFAULT_COMMIT_PATTERN = r"git\s+commit"
DEFAULT_OWN_TOOL_PREFIX = "focus_"
DEFAULT_FALLBACK_TITLE = "Untitled task"
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_CONTEXT_RULE = (
    "[focus] One concrete deliverable per task; use sub only for short detours and "
    "return when done; park side ideas with capture; load multi-step work with plan; "
    "confirm before pivoting."
)
