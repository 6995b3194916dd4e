import pytest

from backend.database import AppSetting, init_db
from backend.security_utils import ValidationError


def test_missing_keys_fall_back_to_defaults(settings_manager):
    settings = settings_manager.get_settings()
    assert settings.daily_budget == 100
    assert settings.reset_time == "04:00"
    assert settings_manager.get_all() == {}


def test_init_db_seeds_defaults_once(engine, session_factory, settings_manager):
    init_db(bind=engine, session_factory=session_factory)
    init_db(bind=engine, session_factory=session_factory)
    assert settings_manager.get_all() == {'DailyBudget': '100', 'ResetTime': '04:00'}


def test_init_db_seeds_the_engine_it_was_given(engine, settings_manager):
    init_db(bind=engine)
    assert settings_manager.get_all() == {'DailyBudget': '100', 'ResetTime': '04:00'}


def test_update_upserts_one_row_per_key(settings_manager):
    saved = settings_manager.update_settings(80, "05:30")
    assert saved.daily_budget == 80
    assert saved.reset_time == "05:30"

    settings_manager.update_settings("120", "23:00")
    assert settings_manager.get_all() == {'DailyBudget': '120', 'ResetTime': '23:00'}
    assert settings_manager.get_daily_budget() == 120
    assert settings_manager.get_reset_time() == "23:00"


def test_update_over_seeded_rows(engine, session_factory, settings_manager):
    init_db(bind=engine, session_factory=session_factory)
    settings_manager.update_settings(60, "06:00")
    with session_factory() as session:
        assert session.query(AppSetting).count() == 2


@pytest.mark.parametrize("budget,reset_time,field", [
    (0, "04:00", 'daily_budget'),
    (-10, "04:00", 'daily_budget'),
    ("lots", "04:00", 'daily_budget'),
    (100, "24:00", 'reset_time'),
    (100, "4:00", 'reset_time'),
    (100, "04:60", 'reset_time'),
    (100, "0400", 'reset_time'),
    (100, "", 'reset_time'),
])
def test_invalid_settings_write_nothing(settings_manager, budget, reset_time, field):
    settings_manager.update_settings(90, "03:00")
    with pytest.raises(ValidationError) as exc:
        settings_manager.update_settings(budget, reset_time)
    assert exc.value.field == field
    assert settings_manager.get_all() == {'DailyBudget': '90', 'ResetTime': '03:00'}


def test_corrupted_budget_is_not_repaired_on_read(session_factory, settings_manager):
    with session_factory() as session:
        session.add(AppSetting(key='DailyBudget', value='not-a-number'))
        session.commit()
    with pytest.raises(ValueError):
        settings_manager.get_daily_budget()
