"""Event-sourced focus tracker for interactive coding agents.

One task is active at a time; sub-tasks are pushed and popped around it,
further work waits in a ready queue or a backlog, and every transition is
appended to ``.focus_stack/events.jsonl`` so state survives restarts.
"""

__version__ = "0.1.0"
