"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers that are often passed around as strings
(option values, slash-command arguments, JSON). The wrappers here accept
either form and normalize to a canonical string. A wrapper compares and
hashes like the raw int ID, so a dict keyed by wrappers can be probed with
``member.id`` directly. Raw strings are not equal to wrappers; wrap them first.
"""

from __future__ import annotations

import re
from typing import Union

import discord

SNOWFLAKE_PATTERN = re.compile(r"^\d{17,20}$")


def is_snowflake(value: str) -> bool:
    """Return True when ``value`` looks like a user-facing Discord ID (17-20 digits)."""
    return bool(SNOWFLAKE_PATTERN.match(value.strip()))


class Snowflake:
    """
    Base wrapper for a Discord snowflake ID.

    Attributes:
        _value (str): The snowflake ID stored as a string for JSON parity.

    Example:
        >>> uid = UserID(123456789012345678)
        >>> uid.to_int()
        123456789012345678
        >>> UserID("123456789012345678") == 123456789012345678
        True
        >>> 123456789012345678 in {UserID(123456789012345678)}
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        """
        Args:
            value: The snowflake ID as a string, int, or wrapper of the same kind.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, Snowflake):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool")
        elif isinstance(value, int):
            if value < 0:
                raise ValueError(f"{type(self).__name__} cannot be negative: {value}")
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
            if self._value.startswith("-"):
                raise ValueError(f"{type(self).__name__} cannot be negative: {value}")
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    def to_int(self) -> int:
        """Return the ID as an integer for Discord API calls."""
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snowflake):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(int(self._value))


class UserID(Snowflake):
    """Snowflake of a Discord user (the platform-wide identity)."""

    __slots__ = ()

    @classmethod
    def from_user(cls, user: Union[discord.Member, discord.User, discord.abc.User]) -> "UserID":
        return cls(user.id)


class GuildID(Snowflake):
    """Snowflake of a Discord guild (server)."""

    __slots__ = ()

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        return cls(guild.id)


class ChannelID(Snowflake):
    """Snowflake of a guild channel."""

    __slots__ = ()

    @classmethod
    def from_channel(cls, channel: discord.abc.GuildChannel) -> "ChannelID":
        return cls(channel.id)


def user_tag(user: object) -> str:
    """Render a user the way audit logs and embeds show them.

    Discord dropped discriminators for most accounts; ``name#0`` is shown as
    just ``name``.
    """
    name = getattr(user, "name", None) or "Unknown User"
    discriminator = getattr(user, "discriminator", None)
    if discriminator and discriminator != "0":
        return f"{name}#{discriminator}"
    return str(name)
