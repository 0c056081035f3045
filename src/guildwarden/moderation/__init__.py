"""
Manual moderation core.

- **duration_parser.py**: ``"30m"`` style durations to milliseconds and back
- **permission_guard.py**: capability and role-hierarchy checks
- **warning_store.py**: in-memory per-guild warning records
- **discord_gateway.py**: py-cord guild adapter used by the dispatcher
- **moderation_dispatcher.py**: runs one action request end to end
- **moderation_logger.py**: console and ``mod-logs`` channel reporting
"""
