"""
Discord bot cogs for Guildwarden.

The cogs live in :mod:`guildwarden.bot.cogs` and are registered explicitly by
:func:`guildwarden.main.load_cogs`.
"""
