"""Tests for modelspine.instance module.

Covers:
- Reads, writes and snapshots (is_modified / get_original / sink)
- Validation gating of set() and save()
- Floating/sunk transitions driven by store results
- Identity filter resolution for save/delete
"""

from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from modelspine import UNDEFINED, Alias, Instance, Model, validators
from modelspine.errors import IdentityError, ValidationError
from modelspine.settings import clear_settings_cache
from modelspine.stores import DeleteResult, InsertResult, UpdateResult
from modelspine.validation import ValidationResult


def always_valid(instance, name, value):
    return ValidationResult()


@pytest.fixture
def foo_model():
    model = Model()
    model.add_field("foo", Alias(property="_foo", validators=(always_valid,)))
    return model


@pytest.fixture
def mock_store():
    store = MagicMock()
    store.insert.return_value = InsertResult(inserted_count=1)
    store.update.return_value = UpdateResult(matched_count=1, modified_count=1)
    store.delete.return_value = DeleteResult(deleted_count=1)
    return store


@pytest.fixture
def ages(mock_store):
    model = Model(mock_store, name="ages")
    model.add_field("id", Alias(property="_id"))
    model.add_field("age", Alias(property="_age", validators=(validators.ge(0),)))
    return model


class TestDraftAndSnapshot:
    def test_alias_lifecycle(self, foo_model):
        instance = foo_model.wrap({"_foo": 1})
        assert instance.get("foo") == 1

        assert instance.set("foo", 2)
        assert instance.get("foo") == 2
        assert instance.is_modified("foo")
        assert instance.get_original("foo") == 1

        instance.sink()
        assert not instance.is_modified()
        assert instance.get_original("foo") == 2

    def test_change_hidden_by_alias_default_is_detected(self):
        model = Model()
        model.add_field("foo", Alias(property="_foo", default=0))
        instance = model.wrap({"_foo": None})
        assert instance.get("foo") == 0

        instance.set("foo", 0)
        assert instance.data == {"_foo": 0}
        assert instance.is_modified("foo")
        assert instance.is_modified()

    def test_opaque_field_compares_values(self):
        model = Model()
        model.add_field("total", {"get": lambda inst, data: data.get("a", 0) + data.get("b", 0)})
        instance = model.wrap({"a": 1, "b": 2})
        instance.data.update({"a": 2, "b": 1})
        assert not instance.is_modified("total")
        instance.data["a"] = 5
        assert instance.is_modified("total")

    def test_wrap_keeps_data_by_reference(self, foo_model):
        data = {"_foo": 1}
        instance = foo_model.wrap(data)
        instance.set("foo", 5)
        assert data == {"_foo": 5}

    def test_snapshot_is_a_deep_copy(self):
        model = Model()
        model.add_field("tags", Alias())
        instance = model.wrap({"tags": ["a"]})
        instance.get("tags").append("b")
        assert instance.is_modified("tags")
        assert instance.get_original("tags") == ["a"]

    def test_get_mask_omits_undefined(self, users):
        instance = users.wrap({"_name": "ann"})
        users.add_field("secret", Alias(readable=False))
        assert instance.get() == {"id": None, "name": "ann", "email": None, "age": None}
        assert instance.get(["name", "secret", "nope"]) == {"name": "ann"}

    def test_get_unknown_field_is_undefined(self, users):
        assert users.create_instance().get("nope") is UNDEFINED

    def test_get_original_without_argument_wraps_snapshot(self, foo_model):
        instance = foo_model.wrap({"_foo": 1})
        instance.set("foo", 2)
        original = instance.get_original()
        assert isinstance(original, Instance)
        assert original.get("foo") == 1
        original.set("foo", 9)
        assert instance.get_original("foo") == 1

    def test_get_original_mask(self, foo_model):
        instance = foo_model.wrap({"_foo": 1})
        instance.set("foo", 2)
        assert instance.get_original(["foo"]) == {"foo": 1}

    def test_is_modified_over_mask(self, users):
        instance = users.wrap({"_name": "ann", "_age": 3})
        instance.set("age", 4)
        assert instance.is_modified()
        assert instance.is_modified(["age"])
        assert not instance.is_modified(["name", "email"])

    def test_sink_false_marks_floating(self, foo_model):
        instance = foo_model.wrap({"_foo": 1})
        instance.sink()
        assert not instance.is_floating
        instance.sink(False)
        assert instance.is_floating


class TestRebind:
    def test_rebind_shares_data_and_state(self, users):
        instance = users.wrap({"_name": "ann", "_age": 3})
        instance.sink()
        instance.set("age", 4)

        view = instance.select(["age"])
        assert view.data is instance.data
        assert not view.is_floating
        assert view.is_modified("age")
        assert view.get_original("age") == 3
        assert view.get() == {"age": 4}

    def test_select_narrows_writes(self, users):
        view = users.wrap({}).select(["name"])
        assert not view.set("age", 3)
        assert view.data == {}


class TestSet:
    def test_set_runs_validators_before_setter(self, ages):
        instance = ages.create_instance()
        with pytest.raises(ValidationError) as exc_info:
            instance.set("age", -1)
        assert instance.data == {}
        assert exc_info.value.result.to_dict() == {
            "age": ["Field must be greater than or equal to 0"]
        }
        assert exc_info.value.context.field == "age"

    def test_set_unknown_or_unwritable_returns_false(self, users):
        users.add_field("ro", Alias(writable=False))
        instance = users.create_instance()
        assert not instance.set("nope", 1)
        assert not instance.set("ro", 1)

    def test_set_undefined_is_ignored(self, users):
        instance = users.create_instance()
        assert not instance.set("name", UNDEFINED)
        assert instance.data == {}

    def test_set_none_is_a_value(self, users):
        instance = users.wrap({"_name": "ann"})
        assert instance.set("name", None)
        assert instance.data == {"_name": None}

    def test_batch_set(self, users):
        instance = users.create_instance()
        assert instance.set({"name": "ann", "age": 3, "email": UNDEFINED})
        assert instance.data == {"_name": "ann", "_age": 3}

    def test_batch_set_reports_partial_writes(self, users):
        instance = users.create_instance()
        assert not instance.set({"name": "ann", "nope": 1})
        assert instance.data == {"_name": "ann"}

    def test_batch_set_stops_at_first_invalid_entry(self, ages):
        instance = ages.create_instance()
        with pytest.raises(ValidationError):
            instance.set({"id": "x", "age": -1})
        assert instance.data == {"_id": "x"}

    def test_set_wrong_type_is_a_validation_error(self, ages):
        instance = ages.create_instance()
        with pytest.raises(ValidationError) as exc_info:
            instance.set("age", "x")
        assert exc_info.value.result.to_dict() == {
            "age": ["Field must be greater than or equal to 0"]
        }
        assert instance.data == {}

    def test_disabled_validation_allows_invalid_values(self, ages):
        instance = ages.create_instance()
        instance.disable_validation()
        assert instance.set("age", -1)
        instance.restore_validation()
        assert instance.validate().has_errors("age")


class TestValidate:
    def test_validate_whole_instance(self, ages):
        instance = ages.wrap({"_age": -3})
        result = instance.validate()
        assert result.to_dict() == {"age": ["Field must be greater than or equal to 0"]}

    def test_validate_candidate_values_without_writing(self, ages):
        instance = ages.create_instance()
        result = instance.validate({"age": -1, "id": "x"})
        assert result.has_errors("age")
        assert not result.has_errors("id")
        assert instance.data == {}

    def test_validate_single_field(self, ages):
        instance = ages.create_instance()
        assert not instance.validate("age", 5).has_errors()
        assert instance.validate("age", UNDEFINED) is None
        assert instance.validate("nope", 1) is None

    def test_validate_skips_unreadable_fields(self):
        model = Model()
        model.add_field("hidden", Alias(readable=False, validators=(validators.required,)))
        assert not model.create_instance().validate().has_errors()

    def test_disabled_validation_reports_nothing(self, ages):
        instance = ages.wrap({"_age": -3})
        instance.disable_validation()
        assert not instance.validate().has_errors()
        assert not instance.validate("age", -1).has_errors()


class TestSaveFloating:
    def test_insert_and_sink(self, ages, mock_store):
        instance = ages.create_instance()
        instance.set("age", 3)
        result = instance.save()
        mock_store.insert.assert_called_once_with({"_age": 3})
        assert result == InsertResult(inserted_count=1)
        assert not instance.is_floating
        assert not instance.is_modified()

    @pytest.mark.parametrize("count", [0, 2])
    def test_stays_floating_unless_exactly_one_inserted(self, ages, mock_store, count):
        mock_store.insert.return_value = InsertResult(inserted_count=count)
        instance = ages.create_instance()
        instance.set("age", 3)
        instance.save()
        assert instance.is_floating
        assert instance.is_modified("age")

    def test_invalid_instance_never_reaches_store(self, ages, mock_store):
        instance = ages.create_instance()
        instance.disable_validation()
        instance.set("age", -1)
        instance.restore_validation()
        with pytest.raises(ValidationError) as exc_info:
            instance.save()
        mock_store.insert.assert_not_called()
        assert instance.is_floating
        assert exc_info.value.context.operation == "save"

    def test_null_store_keeps_instance_floating(self):
        instance = Model().create_instance()
        assert instance.save() == InsertResult(inserted_count=0)
        assert instance.is_floating


class TestSaveSunk:
    def test_update_by_identity(self, ages, mock_store):
        instance = ages.wrap({"_id": "a1", "_age": 3})
        instance.sink()
        instance.set("age", 4)
        result = instance.save()
        mock_store.update.assert_called_once_with(
            {"_id": "a1"}, {"$set": {"_id": "a1", "_age": 4}}
        )
        assert result.modified_count == 1
        assert not instance.is_modified()

    def test_removed_properties_are_unset(self, ages, mock_store):
        instance = ages.wrap({"_id": "a1", "_age": 3, "_legacy": True})
        instance.sink()
        del instance.data["_legacy"]
        instance.save()
        mock_store.update.assert_called_once_with(
            {"_id": "a1"},
            {"$set": {"_id": "a1", "_age": 3}, "$unset": {"_legacy": ""}},
        )

    def test_snapshot_kept_unless_exactly_one_modified(self, ages, mock_store):
        mock_store.update.return_value = UpdateResult(matched_count=1, modified_count=0)
        instance = ages.wrap({"_id": "a1", "_age": 3})
        instance.sink()
        instance.set("age", 4)
        instance.save()
        assert instance.is_modified("age")
        assert not instance.is_floating

    def test_unresolvable_identity_skips_store(self, ages, mock_store):
        instance = ages.wrap({"_age": 3})
        instance.sink()
        with capture_logs() as logs:
            assert instance.save() is None
        mock_store.update.assert_not_called()
        assert any(log["event"] == "instance_identity_unresolvable" for log in logs)

    def test_opaque_identity_is_unresolvable(self, mock_store):
        model = Model(mock_store)
        model.add_field("id", {"get": lambda inst, data: data.get("_id")})
        instance = model.wrap({"_id": "a1"})
        instance.sink()
        assert instance.save() is None
        mock_store.update.assert_not_called()

    def test_unresolvable_identity_raises_in_strict_mode(self, ages, mock_store, monkeypatch):
        monkeypatch.setenv("MODELSPINE_STRICT_IDENTITY", "true")
        clear_settings_cache()
        instance = ages.wrap({"_age": 3})
        instance.sink()
        with pytest.raises(IdentityError) as exc_info:
            instance.save()
        assert exc_info.value.context.field == "id"
        mock_store.update.assert_not_called()

    def test_invalid_sunk_instance_never_reaches_store(self, ages, mock_store):
        instance = ages.wrap({"_id": "a1", "_age": -3})
        instance.sink()
        with pytest.raises(ValidationError):
            instance.save()
        mock_store.update.assert_not_called()


class TestDelete:
    def test_floating_delete_is_noop(self, foo_model):
        store = MagicMock()
        instance = Instance(foo_model, store, {"_foo": 1})
        assert instance.delete() is None
        assert instance.is_floating
        assert store.method_calls == []

    def test_delete_by_identity(self, ages, mock_store):
        instance = ages.wrap({"_id": "a1", "_age": 3})
        instance.sink()
        result = instance.delete()
        mock_store.delete.assert_called_once_with({"_id": "a1"}, multi=False)
        assert result.deleted_count == 1
        assert instance.is_floating

    def test_delete_uses_model_id_field(self, mock_store):
        model = Model(mock_store, id_field="key")
        model.add_field("key", Alias(property="_key"))
        instance = model.wrap({"_key": "k1"})
        instance.sink()
        instance.delete()
        mock_store.delete.assert_called_once_with({"_key": "k1"}, multi=False)

    def test_stays_sunk_unless_exactly_one_deleted(self, ages, mock_store):
        mock_store.delete.return_value = DeleteResult(deleted_count=0)
        instance = ages.wrap({"_id": "a1"})
        instance.sink()
        instance.delete()
        assert not instance.is_floating

    def test_unresolvable_identity_skips_store(self, ages, mock_store):
        instance = ages.wrap({"_age": 3})
        instance.sink()
        assert instance.delete() is None
        mock_store.delete.assert_not_called()


@pytest.mark.integration
class TestMemoryStoreLifecycle:
    def test_insert_update_find_delete(self, users, store):
        ann = users.create_instance()
        ann.set({"name": "ann", "age": 31})
        ann.save()
        assert not ann.is_floating
        assert ann.get("id") is not None
        assert store.count() == 1

        ann.set("age", 32)
        assert ann.save().modified_count == 1
        assert users.find(ann.get("id")).get("age") == 32

        assert ann.delete().deleted_count == 1
        assert ann.is_floating
        assert store.count() == 0

    def test_projected_load_does_not_drop_properties(self, users, store):
        store.insert({"_id": "u1", "_name": "ann", "_email": "ann@example.com"})
        (instance,) = users.find({"id": "u1"}, select=["id", "name"])
        instance.set("name", "anne")
        instance.save()
        assert store.find({"_id": "u1"}) == [
            {"_id": "u1", "_name": "anne", "_email": "ann@example.com"}
        ]

    def test_unchanged_save_keeps_snapshot(self, users, store):
        store.insert({"_id": "u1", "_name": "ann"})
        instance = users.find("u1")
        assert instance.save().modified_count == 0
        assert not instance.is_floating

    def test_repr(self, users):
        instance = users.wrap({"_name": "ann"})
        assert repr(instance) == "Instance(users, floating, {'_name': 'ann'})"
