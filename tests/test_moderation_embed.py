from datetime import datetime, timezone

from guildwarden.datatypes.action_datatypes import ActionType
from guildwarden.datatypes.discord_datatypes import GuildID, UserID
from guildwarden.datatypes.moderation_datatypes import (
    AdvisoryOutcome,
    ModerationOutcome,
    ModerationResult,
    WarningRecord,
)
from guildwarden.ui.moderation_embed import (
    build_result_embed,
    build_warning_dm_embed,
    build_warning_history_embed,
)

USER = UserID(800000000000000001)
MODERATOR = UserID(800000000000000002)


def field_map(embed):
    return {field.name: field.value for field in embed.fields}


def test_warn_result_embed_lists_warning_details():
    result = ModerationResult(
        outcome=ModerationOutcome.SUCCEEDED,
        message="target has been warned.",
        action_type=ActionType.WARN,
        target_id=USER,
        target_tag="target",
        reason="be nice",
        warning_id="abcd1234",
        warning_count=3,
        dm_outcome=AdvisoryOutcome.failed("Forbidden"),
    )

    embed = build_result_embed(result, "mod")

    fields = field_map(embed)
    assert embed.title == "⚠️ User Warned"
    assert fields["Warning ID"] == "abcd1234"
    assert fields["Total Warnings"] == "3"
    assert fields["Moderator"] == "mod"
    assert "DMs disabled" in embed.footer.text


def test_timeout_result_embed_shows_duration():
    result = ModerationResult(
        outcome=ModerationOutcome.SUCCEEDED,
        message="target has been timed out for 1 hour.",
        action_type=ActionType.TIMEOUT,
        target_id=USER,
        target_tag="target",
        reason="calm down",
        details={"duration": "1 hour"},
    )

    fields = field_map(build_result_embed(result, "mod"))

    assert fields["Duration"] == "1 hour"
    assert "Warning ID" not in fields


def test_warning_dm_embed():
    embed = build_warning_dm_embed("Test Guild", "abcd1234", "be nice", 2)

    assert embed.description == "You have received a warning in Test Guild"
    assert field_map(embed)["Total Warnings"] == "2"


def test_warning_history_embed_empty():
    embed = build_warning_history_embed("target", None, [], {})

    assert embed.description == "This user has no warnings. 🎉"
    assert embed.fields == []


def test_warning_history_embed_resolves_moderators():
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)
    warnings = [
        WarningRecord("bbbb2222", GuildID(1), USER, "second", MODERATOR, when),
        WarningRecord("aaaa1111", GuildID(1), USER, "first", UserID(900000000000000009), when),
    ]

    embed = build_warning_history_embed("target", "https://cdn.example/a.png", warnings, {str(MODERATOR): "mod (x)"})

    assert embed.description == "Found 2 warnings for this user."
    assert embed.fields[0].name == "Warning #1 (ID: bbbb2222)"
    assert "**Moderator:** mod (x)" in embed.fields[0].value
    assert "Unknown User (900000000000000009)" in embed.fields[1].value
    assert f"<t:{int(when.timestamp())}:f>" in embed.fields[0].value
