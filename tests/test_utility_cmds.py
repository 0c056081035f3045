from types import SimpleNamespace

from guildwarden.bot.cogs import utility_cmds
from guildwarden.bot.cogs.utility_cmds import (
    HELP_CATEGORIES,
    build_help_embed,
    check_role_change,
    find_help_category,
)


def member(position):
    return SimpleNamespace(top_role=SimpleNamespace(position=position))


def test_find_help_category_is_case_insensitive():
    assert find_help_category("MODERATION").name == "Moderation"
    assert find_help_category("music") is None


def test_help_overview_lists_every_category():
    embed = build_help_embed(None)

    assert embed.title == "📚 Help Menu"
    assert len(embed.fields) == len(HELP_CATEGORIES) + 1
    assert embed.fields[-1].name == "❔ Help Notes"


def test_help_category_lists_commands():
    fun = find_help_category("fun")
    embed = build_help_embed(fun)

    assert embed.title == "🎮 Fun Commands"
    assert [field.name for field in embed.fields[:-1]] == [entry.name for entry in fun.commands]
    assert "**Usage:** `/8ball <question>`" in embed.fields[0].value


def test_check_role_change():
    role = SimpleNamespace(managed=False, position=5)

    assert check_role_change(role, member(10), member(20)) is None
    assert check_role_change(SimpleNamespace(managed=True, position=1), member(10), member(20)) == (
        "I cannot manage that role as it's integrated with a service."
    )
    assert check_role_change(role, member(10), member(5)) == (
        "I cannot manage that role as it's higher than or equal to my highest role."
    )
    assert check_role_change(role, member(5), member(20)) == (
        "You cannot manage this role as it's higher than or equal to your highest role."
    )
    assert check_role_change(role, member(10), None).startswith("I cannot manage")


def test_setup_registers_cog():
    captured = {}
    utility_cmds.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)))

    assert isinstance(captured["cog"], utility_cmds.UtilityCog)
