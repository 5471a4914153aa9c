from datetime import date, time

import pytest

from fitlog.core import grammar as g
from fitlog.core.grammar import (
    CreateArgs,
    EndArgs,
    ExerciseArgs,
    OverrideTagArgs,
    ParseContext,
    PickArgs,
    SetArgs,
    ViewLogArgs,
    tokenize,
)
from fitlog.core.models import YearMonth
from fitlog.core.results import Err, ErrorKind, Ok


def _err(result) -> str:
    assert isinstance(result, Err), result
    assert result.kind is ErrorKind.INVALID_ARGUMENT
    return result.message


# ── tokenizer ────────────────────────────────────────────────────────────────
def test_tokenize_finds_markers_at_word_starts_only():
    tokens = tokenize("n/Push/Pull d/23/10/25")
    assert [t.flag for t in tokens] == ["n", "d"]
    assert tokens[0].raw == "Push/Pull "
    assert tokens[1].raw == "23/10/25"


def test_tokenize_multi_letter_markers():
    assert [t.flag for t in tokenize("id/3 ym/10/25 pg/2 tag/push")] == ["id", "ym", "pg", "tag"]


# ── create ───────────────────────────────────────────────────────────────────
def test_strict_create_parses_all_fields(ctx):
    result = g.parse_create("n/Leg Day d/23/10/25 t/1900", ctx)
    assert result == Ok(CreateArgs("Leg Day", date(2025, 10, 23), time(19, 0), True))


def test_empty_name_is_reported_as_missing(ctx):
    msg = _err(g.parse_create("n/ d/23/10/25 t/1900", ctx))
    assert "name missing after n/" in msg


def test_flex_create_only_needs_a_name(ctx):
    assert g.parse_create("n/Morning Run", ctx) == Ok(CreateArgs("Morning Run", None, None, False))


def test_strict_create_requires_time_once_date_is_given(ctx):
    assert "exactly one t/" in _err(g.parse_create("n/Leg Day d/23/10/25", ctx))


def test_space_after_flag_is_its_own_error(ctx):
    msg = _err(g.parse_create("n/Leg Day d/ 23/10/25 t/1900", ctx))
    assert msg.startswith("Remove the space after d/")
    assert "Remove the space after n/" in _err(g.parse_create("n/ Leg Day", ctx))


def test_flags_out_of_order(ctx):
    assert "Order must be n/ then d/ then t/" in _err(g.parse_create("d/23/10/25 n/Leg Day t/1900", ctx))


def test_unsupported_flag_is_rejected(ctx):
    msg = _err(g.parse_create("n/Leg Day x/1 d/23/10/25 t/1900", ctx))
    assert 'Unsupported flag "x/" found.' in msg


def test_trailing_text_after_last_flag(ctx):
    assert "Unexpected text after" in _err(g.parse_create("n/Leg Day d/23/10/25 t/1900 x/1", ctx))


def test_leading_text_before_first_flag(ctx):
    assert "Unexpected text before n/" in _err(g.parse_create("hello n/Leg Day", ctx))


def test_illegal_character_is_quoted(ctx):
    msg = _err(g.parse_create("n/Leg@Day", ctx))
    assert "@" in msg and "not allowed" in msg


def test_name_too_long(ctx):
    assert "too long (33)" in _err(g.parse_create("n/" + "a" * 33, ctx))


@pytest.mark.parametrize(
    "date_text, expected",
    [
        ("31/02/25", "does not exist"),
        ("01/13/25", "Month must be between 1 and 12"),
        ("2025-10-23", "Invalid date"),
        ("23/12/24", "before 2025-01"),
    ],
)
def test_bad_dates(ctx, date_text, expected):
    assert expected in _err(g.parse_create(f"n/A d/{date_text} t/1900", ctx))


def test_year_upper_bound():
    ctx = ParseContext(today=date(2025, 10, 23), first_month=YearMonth(2025, 1), max_year=2030)
    assert "after 2030" in _err(g.parse_create("n/A d/01/01/31 t/1900", ctx))


@pytest.mark.parametrize("bad", ["2460", "930", "19:00", "2400"])
def test_bad_times(ctx, bad):
    assert "Invalid time" in _err(g.parse_create(f"n/A d/23/10/25 t/{bad}", ctx))


def test_usage_is_attached_to_failures(ctx):
    result = g.parse_create("n/A d/23/10/25 t/99", ctx)
    assert isinstance(result, Err)
    assert result.usage == g.CREATE_STRICT.usage


# ── exercises / sets ─────────────────────────────────────────────────────────
def test_add_exercise(ctx):
    assert g.parse_add_exercise("n/Squat r/12", ctx) == Ok(ExerciseArgs("Squat", 12))


@pytest.mark.parametrize("reps", ["0", "1001", "abc", "00012", "-3"])
def test_reps_out_of_range(ctx, reps):
    assert "reps must be 1..1000" in _err(g.parse_add_exercise(f"n/Squat r/{reps}", ctx))


def test_add_set(ctx):
    assert g.parse_add_set("r/1000", ctx) == Ok(SetArgs(1000))
    assert "Missing information" in _err(g.parse_add_set("", ctx))
    assert "exactly one r/" in _err(g.parse_add_set("12", ctx))
    assert "exactly one r/" in _err(g.parse_add_set("r/12 r/10", ctx))


# ── end ──────────────────────────────────────────────────────────────────────
def test_end_flags_are_optional(ctx):
    assert g.parse_end("", ctx) == Ok(EndArgs(None, None))
    assert g.parse_end("t/2100", ctx) == Ok(EndArgs(None, time(21, 0)))
    assert g.parse_end("d/23/10/25 t/2100", ctx) == Ok(EndArgs(date(2025, 10, 23), time(21, 0)))


def test_end_order_and_junk(ctx):
    assert "Order must be d/ then t/" in _err(g.parse_end("t/2100 d/23/10/25", ctx))
    assert "Unexpected text" in _err(g.parse_end("hello", ctx))


# ── selection par ID / mois ──────────────────────────────────────────────────
@pytest.mark.parametrize(
    "text, month",
    [
        ("id/2", YearMonth(2025, 10)),
        ("id/2 m/9", YearMonth(2025, 9)),
        ("id/2 ym/09/25", YearMonth(2025, 9)),
        ("id/2 ym/9/2025", YearMonth(2025, 9)),
    ],
)
def test_delete_month_defaults_and_forms(ctx, text, month):
    assert g.parse_delete(text, ctx) == Ok(PickArgs(2, month))


def test_delete_rejects_bad_ids_and_months(ctx):
    assert "Cannot combine m/ with ym/" in _err(g.parse_delete("id/2 m/9 ym/09/25", ctx))
    assert "positive integer" in _err(g.parse_delete("id/0", ctx))
    assert "between 1 and 12" in _err(g.parse_delete("id/2 m/13", ctx))
    assert "Unsupported flag" in _err(g.parse_delete("r/2 id/1", ctx))


def test_view_log(ctx):
    assert g.parse_view_log("", ctx) == Ok(ViewLogArgs(1, YearMonth(2025, 10)))
    assert g.parse_view_log("pg/2 m/10", ctx) == Ok(ViewLogArgs(2, YearMonth(2025, 10)))


def test_override_tag_lowercases(ctx):
    assert g.parse_override_tag("id/1 tag/Push", ctx) == Ok(OverrideTagArgs(1, "push", YearMonth(2025, 10)))


def test_profile_grammars(ctx):
    assert g.parse_add_weight("w/72.5 d/20/10/25", ctx).value == g.WeightArgs(72.5, date(2025, 10, 20))
    assert "Invalid weight" in _err(g.parse_add_weight("w/0", ctx))
    assert "Invalid weight" in _err(g.parse_add_weight("w/501", ctx))
    assert g.parse_my_name("n/Alex", ctx).value == g.NameArgs("Alex")
    assert g.parse_add_muscle_tag("m/legs k/Lunge", ctx).value == g.KeywordArgs("LEGS", "lunge")
    assert "Unknown modality" in _err(g.parse_add_modality_tag("m/yoga k/flow", ctx))


# ── totalité ─────────────────────────────────────────────────────────────────
INPUTS = [
    "", "   ", "\t\n", "/", "n/", "x/1", "n/a n/b", "d/", "t/9999", "r/00012",
    "id/99999999999999999999", "ym/0/0", "w/-1", "k/", "tag/ ", "pg/1 pg/2",
    "n/a\td/01/01/25", "m/CARDIO k/x", "n/Leg Day d/23/10/25 t/1900", "id/1 tag/push m/10",
]


@pytest.mark.parametrize("grammar", g.GRAMMARS + (g.CREATE_FLEX,), ids=lambda gr: gr.usage)
@pytest.mark.parametrize("text", INPUTS)
def test_every_input_gets_exactly_one_outcome(ctx, grammar, text):
    result = g.parse(grammar, text, ctx)
    assert isinstance(result, Ok) != isinstance(result, Err)
    if isinstance(result, Err):
        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert result.message
    else:
        assert set(result.value) == set(grammar.flags)
