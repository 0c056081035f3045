"""
Cogs package for Guildwarden.

- **moderation_cmds.py**: the ``/mod`` group, backed by the moderation dispatcher
- **welcome_cmds.py**: ``/welcome`` configuration and ``/testwelcome``
- **utility_cmds.py**: ping, avatar, server/user info, role management, help
- **fun_cmds.py**: 8ball, coinflip, dice, rps, poll
- **events_listener.py**: presence on ready, welcome on member join, command errors

Each module defines a cog class and a setup function to register it with the
bot. Shared stores are passed into ``setup`` rather than imported.
"""
