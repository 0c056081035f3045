"""
Embed builders for Guildwarden.

- **moderation_embed.py**: action confirmations, mod-log entries, warning DMs and history
- **welcome_embed.py**: welcome, preview and status embeds plus template formatting
"""
