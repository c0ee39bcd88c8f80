"""
Tests for the form state store
"""

import pytest

from journeykit.core.journey.form_state import FormStateStore


class TestFormStateStore:
    """Copy-on-write updates and step snapshots"""

    def test_initial_values_seed_initial_step(self):
        store = FormStateStore({"firstName": "Al"}, initial_step=2)
        assert dict(store.form_data) == {"firstName": "Al"}
        assert store.snapshot_of(2) == {"firstName": "Al"}
        assert store.step_index == 2

    def test_set_field_does_not_touch_previous_form(self):
        store = FormStateStore({"firstName": "Al"})
        before = store.form_data
        store.set_field("firstName", "Bo")
        assert before["firstName"] == "Al"
        assert store.form_data["firstName"] == "Bo"

    def test_set_field_records_current_step_snapshot(self):
        store = FormStateStore()
        store.restore_step(1)
        store.set_field("email", "x@y.com")
        assert store.snapshot_of(1) == {"email": "x@y.com"}
        assert store.snapshot_of(0) == {}

    def test_values_are_copied_in_and_out(self):
        store = FormStateStore()
        channels = ["email"]
        store.set_field("channels", channels)
        channels.append("sms")
        assert store.form_data["channels"] == ["email"]

        copy = store.value_for("channels")
        copy.append("phone")
        assert store.snapshot_of(0) == {"channels": ["email"]}

    def test_nested_values_in_form_data_are_detached(self):
        store = FormStateStore()
        store.set_field("channels", ["email"])
        store.snapshot(0)
        store.form_data["channels"].append("sms")
        assert store.form_data["channels"] == ["email"]
        assert store.snapshot_of(0) == {"channels": ["email"]}

    def test_form_data_is_read_only(self):
        store = FormStateStore({"a": 1})
        with pytest.raises(TypeError):
            store.form_data["a"] = 2

    def test_restore_without_snapshot_keeps_form(self):
        store = FormStateStore({"firstName": "Al"})
        assert store.restore_step(1) is False
        assert dict(store.form_data) == {"firstName": "Al"}
        assert store.step_index == 1

    def test_restore_with_snapshot(self):
        store = FormStateStore({"firstName": "Al"})
        store.restore_step(1)
        store.set_field("email", "x@y.com")
        assert store.restore_step(0) is True
        assert dict(store.form_data) == {"firstName": "Al"}

    def test_snapshot_of_step_being_left(self):
        store = FormStateStore()
        store.restore_step(3)
        assert not store.has_snapshot(3)
        store.snapshot(3)
        assert store.has_snapshot(3)

    def test_touched_fields(self):
        store = FormStateStore({"firstName": "Al"})
        assert store.touched == frozenset()
        store.set_field("email", "x")
        assert store.touched == {"email"}

    def test_clear(self):
        store = FormStateStore({"firstName": "Al"})
        store.set_field("email", "x")
        store.clear()
        assert dict(store.form_data) == {}
        assert store.snapshot_of(0) is None
        assert store.touched == frozenset()
