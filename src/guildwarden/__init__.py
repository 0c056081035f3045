"""
Guildwarden - Discord server management bot

Guildwarden gives server staff slash commands for manual moderation and
welcome messages, plus a handful of utility and fun commands for members.

Core Components:

- **Moderation**: Permission and role-hierarchy guard, duration parsing,
  in-memory warning store, and a dispatcher that runs kick, ban, unban,
  timeout, remove-timeout, warn and warning-history requests
- **Moderation Logging**: Console log line plus an embed in the guild's
  ``mod-logs`` channel for every completed action
- **Welcome System**: Per-guild welcome embed configuration and delivery on join
- **Utility and Fun Commands**: Server/user info, role management, help, and games

Usage:
    from guildwarden.main import main
    main()
"""
