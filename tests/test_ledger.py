from datetime import date

from models import IslandLevel, Reward, Row, Settings, UserData
from utils.ledger import (
    apply_field_change,
    apply_row_patch,
    apply_to_user_data,
    level_info,
    level_progress,
    next_level_info,
    pomodoro_reward,
    redeem,
    resolve_field,
    save_memo,
)

TODAY = date(2024, 1, 1)
SETTINGS = Settings()


def test_practice_flag_rewards_only_on_first_tick():
    row = Row(id="r")
    first = apply_field_change(row, "practice1", True, SETTINGS, TODAY)
    assert (first.exp_delta, first.coin_delta) == (SETTINGS.exp_practice, SETTINGS.coin_practice)

    row = apply_row_patch(row, first.row_patch)
    again = apply_field_change(row, "practice1", True, SETTINGS, TODAY)
    assert (again.exp_delta, again.coin_delta) == (0, 0)
    assert again.log_date == "2024-01-01"


def test_correction_flags_reward_in_every_round():
    row = Row(id="r")
    change = apply_field_change(row, "correct3", True, SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_correct
    assert change.row_patch == {"correct3": True}


def test_unticking_a_flag_earns_nothing():
    row = Row(id="r", practice2=True)
    change = apply_field_change(row, "practice2", False, SETTINGS, TODAY)
    assert change.exp_delta == 0
    assert change.row_patch == {"practice2": False}


def test_passing_score_accumulates_entry_and_pass_bonus():
    row = Row(id="r")
    change = apply_field_change(row, "score1", "85", SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_score_entry + SETTINGS.exp_pass
    assert change.coin_delta == SETTINGS.coin_score_entry + SETTINGS.coin_pass
    assert change.row_patch == {
        "score1": "85",
        "score1_date": "2024-01-01",
        "suggested_date2": "2024-01-04",
    }


def test_failing_score_only_earns_entry_reward():
    change = apply_field_change(Row(id="r"), "score1", 60, SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_score_entry
    assert change.row_patch["score1"] == "60"
    assert change.row_patch["suggested_date2"] == "2024-01-02"


def test_pass_bonus_is_not_paid_again_after_editing_down_and_up():
    row = Row(id="r")
    entered = apply_field_change(row, "score1", "90", SETTINGS, TODAY)
    row = apply_row_patch(row, entered.row_patch)
    down = apply_field_change(row, "score1", "60", SETTINGS, TODAY)
    row = apply_row_patch(row, down.row_patch)
    up = apply_field_change(row, "score1", "90", SETTINGS, TODAY)
    assert entered.exp_delta == SETTINGS.exp_score_entry + SETTINGS.exp_pass
    assert (down.exp_delta, up.exp_delta) == (0, 0)
    assert (down.coin_delta, up.coin_delta) == (0, 0)
    assert row.score1_date == "2024-01-01"


def test_legacy_unstamped_failing_score_earns_pass_bonus_when_raised():
    row = Row(id="r", score1="60")
    change = apply_field_change(row, "score1", "85", SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_pass
    assert change.row_patch["score1_date"] == "2024-01-01"


def test_clearing_a_score_clears_stamp_and_review_date():
    row = Row(id="r", score1="85", score1_date="2024-01-01", suggested_date2="2024-01-04")
    change = apply_field_change(row, "score1", "", SETTINGS, TODAY)
    assert change.exp_delta == 0
    assert change.row_patch == {"score1": "", "score1_date": "", "suggested_date2": ""}
    assert change.log_date == "2024-01-01"


def test_every_change_logs_exactly_once():
    user = UserData()
    for field, value in (("topic", "Algebra"), ("practice1", True), ("score1", "90")):
        change = apply_field_change(Row(id="r"), field, value, SETTINGS, TODAY)
        user = apply_to_user_data(user, change)
    assert user.logs == {"2024-01-01": 3}
    assert user.exp == SETTINGS.exp_practice + SETTINGS.exp_score_entry + SETTINGS.exp_pass


def test_negative_amounts_never_reduce_progress():
    stingy = Settings(exp_practice=-50, coin_practice=-5)
    change = apply_field_change(Row(id="r"), "practice1", True, stingy, TODAY)
    assert (change.exp_delta, change.coin_delta) == (0, 0)


def test_unknown_or_derived_fields_are_not_editable():
    assert resolve_field("dueDate") == "due_date"
    assert resolve_field("suggestedDate2") is None
    assert resolve_field("id") is None
    assert resolve_field("nope") is None
    change = apply_field_change(Row(id="r"), "nope", 1, SETTINGS, TODAY)
    assert change.row_patch == {}
    assert change.log_date is None


def test_memo_save_sets_note_and_rewards_once():
    row = Row(id="r")
    change = save_memo(row, "Remember the sign rules", "", SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_memo
    assert change.row_patch == {"note": True, "memo": "Remember the sign rules", "link": ""}
    row = apply_row_patch(row, change.row_patch)
    assert save_memo(row, "edited", "", SETTINGS, TODAY).exp_delta == 0
    assert save_memo(row, "", "", SETTINGS, TODAY).row_patch["note"] is False


def test_pomodoro_reward():
    change = pomodoro_reward(SETTINGS, TODAY)
    assert change.exp_delta == SETTINGS.exp_pomodoro
    assert change.row_patch == {}


def test_redeem_rejects_when_short_of_coins():
    user = UserData(exp=100, coins=5)
    result = redeem(user, Reward(id="rw", name="Break", cost=10))
    assert result.accepted is False
    assert result.user_data.coins == 5
    assert result.coin_delta == 0


def test_redeem_deducts_exact_cost():
    user = UserData(exp=100, coins=10)
    result = redeem(user, Reward(id="rw", name="Break", cost=10))
    assert result.accepted is True
    assert result.user_data.coins == 0
    assert result.user_data.exp == 100
    assert result.coin_delta == -10


LEVELS = [
    IslandLevel(level=3, min_exp=300, title="C"),
    IslandLevel(level=1, min_exp=0, title="A"),
    IslandLevel(level=2, min_exp=100, title="B"),
]


def test_level_lookup_and_progress():
    assert level_info(150, LEVELS).level == 2
    assert next_level_info(level_info(150, LEVELS), LEVELS).level == 3
    assert level_progress(150, LEVELS) == 25.0
    assert level_info(0, LEVELS).level == 1
    assert level_progress(500, LEVELS) == 100.0


def test_level_lookup_falls_back_to_synthetic_level():
    for table in ([], None, "junk", [{"title": "no threshold"}]):
        assert level_info(50, table).level == 1
        assert level_progress(50, table) == 100.0
