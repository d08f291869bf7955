"""Tests for the live settings store and settings updates."""
import pytest

from config.settings_store import SettingsStore
from models.settings import SettingsUpdate, SettingsUpdateError


# ── SettingsUpdate parsing ───────────────────────────

def test_update_from_camel_case_payload():
    update = SettingsUpdate.from_dict({
        "token": "abc",
        "checkInterval": 60,
        "chatIDs": [1, 2],
        "responseStyle": "short",
    })
    assert update.token == "abc"
    assert update.check_interval == 60
    assert update.chat_ids == [1, 2]
    assert update.response_style == "short"


def test_update_accepts_snake_case_aliases():
    update = SettingsUpdate.from_dict({"check_interval": 30, "chat_ids": ["5"]})
    assert update.check_interval == 30
    assert update.chat_ids == [5]


def test_update_collapses_duplicate_chat_ids():
    update = SettingsUpdate.from_dict({"chatIDs": [3, 1, 3, 2, 1]})
    assert update.chat_ids == [3, 1, 2]


@pytest.mark.parametrize("payload", [
    {"chatIDs": ["not-a-number"]},
    {"chatIDs": 5},
    {"checkInterval": "soon"},
    {"token": 12345},
    {"responseStyle": ["a"]},
    {"checkInterval": 0.5},
    {"checkInterval": 60.5},
    {"chatIDs": [1.9]},
])
def test_update_rejects_bad_types(payload):
    with pytest.raises(SettingsUpdateError):
        SettingsUpdate.from_dict(payload)


def test_update_rejects_non_object():
    with pytest.raises(SettingsUpdateError):
        SettingsUpdate.from_dict([1, 2, 3])


@pytest.mark.parametrize("payload", [
    {},
    {"token": ""},
    {"checkInterval": 0},
    {"checkInterval": -5},
    {"chatIDs": []},
    {"responseStyle": "   "},
])
def test_update_empty_when_nothing_usable(payload):
    assert SettingsUpdate.from_dict(payload).is_empty()


# ── SettingsStore ────────────────────────────────────

def test_store_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        SettingsStore(check_interval=0)


def test_get_returns_consistent_snapshot(settings):
    snap = settings.get()
    assert snap.token.startswith("123456789:")
    assert snap.check_interval == 2700
    assert snap.chat_ids == [111, 222]
    assert snap.response_style == "concise"
    assert snap.running is False


def test_chat_ids_getter_returns_copy(settings):
    ids = settings.get_chat_ids()
    ids.append(999)
    assert settings.get_chat_ids() == [111, 222]


def test_empty_chat_ids_fall_back_to_defaults():
    store = SettingsStore(chat_ids=[], default_chat_ids=[-42])
    assert store.get_chat_ids() == [-42]


def test_apply_update_changes_only_supplied_fields(settings):
    changed = settings.apply_update(SettingsUpdate(check_interval=60))
    assert changed is True
    assert settings.get_check_interval() == 60
    assert settings.get_chat_ids() == [111, 222]
    assert settings.get_response_style() == "concise"


def test_apply_update_ignores_invalid_fields(settings):
    changed = settings.apply_update(SettingsUpdate(token="", check_interval=-1,
                                                   chat_ids=[], response_style=" "))
    assert changed is False
    assert settings.get().check_interval == 2700


def test_identical_update_is_noop(settings):
    changed = settings.apply_update(SettingsUpdate(check_interval=2700, chat_ids=[111, 222],
                                                   response_style="concise"))
    assert changed is False


def test_chat_id_permutation_counts_as_change(settings):
    assert settings.apply_update(SettingsUpdate(chat_ids=[222, 111])) is True
    assert settings.get_chat_ids() == [222, 111]


def test_duplicate_chat_ids_in_update_are_collapsed(settings):
    settings.apply_update(SettingsUpdate(chat_ids=[5, 5, 6]))
    assert settings.get_chat_ids() == [5, 6]


# ── Restart generation ───────────────────────────────

def test_change_while_running_signals_generation(settings):
    generation = settings.activate()
    assert not generation.is_set()

    settings.apply_update(SettingsUpdate(token="new-token"))

    assert generation.is_set()
    fresh = settings.generation
    assert fresh is not generation
    assert not fresh.is_set()


def test_noop_update_does_not_signal(settings):
    generation = settings.activate()
    settings.apply_update(SettingsUpdate(check_interval=2700))
    assert not generation.is_set()
    assert settings.generation is generation


def test_change_while_stopped_does_not_signal(settings):
    generation = settings.generation
    settings.apply_update(SettingsUpdate(check_interval=10))
    assert not generation.is_set()


def test_activate_and_deactivate(settings):
    settings.activate()
    assert settings.is_running
    assert settings.get().running is True
    settings.deactivate()
    assert not settings.is_running


def test_from_config(base_config):
    store = SettingsStore.from_config(base_config)
    assert store.get_check_interval() == 2700
    assert store.get_chat_ids() == [111, 222]
    assert store.get_response_style() == "concise"


def test_update_accepts_integral_floats():
    update = SettingsUpdate.from_dict({"checkInterval": 60.0, "chatIDs": [7.0]})
    assert update.check_interval == 60
    assert update.chat_ids == [7]
