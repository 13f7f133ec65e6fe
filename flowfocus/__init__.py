# FlowFocus task board: in-memory state engine for a three-column Kanban board.
#
# Components:
#   schema.py         - Data model (Task, TaskDraft, TaskStatus, TaskPriority)
#   errors.py         - Error taxonomy shared by the gateway and the coordinator
#   dates.py          - Due date parsing and display rules
#   store.py          - Task store, the single owner of canonical task records
#   projector.py      - Search/status/priority filter projection
#   columns.py        - Per-status column grouping and counts
#   drag.py           - Drag-and-drop state machine and toggle-complete command
#   coordinator.py    - Optimistic create/update/delete against the gateway
#   gateway.py        - Gateway contract and in-memory gateway
#   sqlite_gateway.py - SQLite-backed gateway
#   notify.py         - Notification sinks (log, webhook, in-memory)
#   stats.py          - Dashboard aggregates
#   board.py          - Board facade wiring the above together
#   config.py         - YAML configuration
#   cli.py            - Command-line interface

__version__ = "0.3.0"
