from types import SimpleNamespace

import pytest

from guildwarden.datatypes.discord_datatypes import ChannelID, GuildID, UserID, is_snowflake, user_tag


def test_snowflake_accepts_int_and_str():
    uid = UserID("123456789012345678")

    assert uid.to_int() == 123456789012345678
    assert uid == 123456789012345678
    assert uid != "123456789012345678"
    assert str(uid) == "123456789012345678"
    assert UserID(uid) == uid
    assert repr(uid) == "UserID('123456789012345678')"


def test_snowflake_hash_matches_equal_values():
    assert hash(UserID(42)) == hash(UserID("42"))
    assert {UserID(42): "x"}[UserID("42")] == "x"


def test_wrappers_key_dicts_by_raw_int():
    assert 5 in {UserID(5)}
    assert {UserID(5): 1}.get(5) == 1
    assert {GuildID(7): "guild"}[7] == "guild"
    assert hash(UserID("123456789012345678")) == hash(123456789012345678)


def test_from_object_constructors():
    obj = SimpleNamespace(id=123456789012345678)

    assert UserID.from_user(obj) == 123456789012345678
    assert GuildID.from_guild(obj) == 123456789012345678
    assert ChannelID.from_channel(obj) == 123456789012345678


def test_wrappers_of_different_kinds_are_not_equal():
    assert UserID(42) != GuildID(42)
    assert ChannelID(42) != UserID(42)


@pytest.mark.parametrize("value", [-1, "-5", True, 1.5, "abc", None])
def test_snowflake_rejects_invalid_values(value):
    with pytest.raises(ValueError):
        UserID(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123456789012345678", True),
        ("  12345678901234567  ", True),
        ("1234", False),
        ("12345678901234567x", False),
        ("", False),
    ],
)
def test_is_snowflake(value, expected):
    assert is_snowflake(value) is expected


def test_user_tag():
    assert user_tag(SimpleNamespace(name="alice", discriminator="0")) == "alice"
    assert user_tag(SimpleNamespace(name="bob", discriminator="1234")) == "bob#1234"
    assert user_tag(object()) == "Unknown User"
