"""Unit tests for field-level change detection and batch ids."""
import re
from datetime import datetime
from decimal import Decimal

from mssp.utils.audit import FieldChange, _stringify, detect_changes, generate_batch_id


def test_detects_changed_scalar_fields() -> None:
    """Test only fields whose value differs are reported."""
    old = {"name": "Acme", "industry": "Retail", "status": "active"}
    new = {"name": "Acme", "industry": "Finance", "status": "inactive"}

    changes = detect_changes(old, new)

    assert changes == [
        FieldChange(field="industry", old_value="Retail", new_value="Finance"),
        FieldChange(field="status", old_value="active", new_value="inactive"),
    ]


def test_identical_snapshots_have_no_changes() -> None:
    """Test that equal snapshots produce an empty change list."""
    snapshot = {"name": "Acme", "scope": {"endpoints": 10, "sites": ["HQ"]}}

    assert detect_changes(snapshot, dict(snapshot)) == []


def test_bookkeeping_fields_are_ignored() -> None:
    """Test id and timestamp bookkeeping fields never count as changes."""
    old = {"id": 1, "created_at": datetime(2024, 1, 1), "updated_at": datetime(2024, 1, 1), "name": "A"}
    new = {"id": 2, "created_at": datetime(2025, 1, 1), "updated_at": datetime(2025, 1, 1), "name": "A"}

    assert detect_changes(old, new) == []


def test_camel_case_timestamps_are_ignored() -> None:
    changes = detect_changes({"name": "A", "updatedAt": "t1"}, {"name": "B", "updatedAt": "t2"})

    assert changes == [FieldChange(field="name", old_value="A", new_value="B")]


def test_list_values_are_compared() -> None:
    changes = detect_changes({"tags": ["a"]}, {"tags": ["a", "b"]})

    assert changes == [FieldChange(field="tags", old_value=["a"], new_value=["a", "b"])]


def test_other_timestamp_fields_are_compared() -> None:
    """Test business dates containing 'At' or '_at' are still tracked."""
    old = {"deleted_at": None, "lastAttemptAt": "2024-01-01"}
    new = {"deleted_at": "2024-02-01T00:00:00", "lastAttemptAt": "2024-01-02"}

    fields = [change.field for change in detect_changes(old, new)]

    assert fields == ["deleted_at", "lastAttemptAt"]


def test_nested_values_compare_structurally() -> None:
    """Test dict key order does not create a false change, but a nested edit does."""
    old = {"scope_definition": {"a": 1, "b": [1, 2]}}
    reordered = {"scope_definition": {"b": [1, 2], "a": 1}}
    edited = {"scope_definition": {"a": 1, "b": [1, 3]}}

    assert detect_changes(old, reordered) == []
    assert detect_changes(old, edited) == [
        FieldChange(field="scope_definition", old_value={"a": 1, "b": [1, 2]}, new_value={"a": 1, "b": [1, 3]})
    ]


def test_missing_key_differs_from_none() -> None:
    """Test a key present on only one side is a change even when the other side is None."""
    changes = detect_changes({"notes": None}, {})

    assert changes == [FieldChange(field="notes", old_value=None, new_value=None)]


def test_keys_reported_in_first_seen_order() -> None:
    """Test old keys come first, followed by keys only present in the new snapshot."""
    old = {"b": 1, "a": 1}
    new = {"c": 1, "a": 2, "b": 2}

    assert [change.field for change in detect_changes(old, new)] == ["b", "a", "c"]


def test_custom_ignore_fields() -> None:
    """Test callers can exclude additional fields."""
    changes = detect_changes({"name": "A", "password": "x"}, {"name": "B", "password": "y"}, ignore_fields={"password"})

    assert [change.field for change in changes] == ["name"]


def test_none_snapshots_are_treated_as_empty() -> None:
    """Test creating from nothing reports every field of the new snapshot."""
    changes = detect_changes(None, {"name": "A"})

    assert changes == [FieldChange(field="name", old_value=None, new_value="A")]


def test_decimal_and_datetime_values_compare_by_string_form() -> None:
    """Test values JSON cannot encode natively are compared via str()."""
    old = {"total_value": Decimal("100.00"), "start_date": datetime(2024, 1, 1)}
    new = {"total_value": Decimal("100.00"), "start_date": datetime(2024, 6, 1)}

    assert [change.field for change in detect_changes(old, new)] == ["start_date"]


def test_stringify_change_values() -> None:
    """Test how change history renders old and new values."""
    assert _stringify(None) == ""
    assert _stringify("Retail") == "Retail"
    assert _stringify(0) == "0"
    assert _stringify(False) == "false"
    assert _stringify({"a": 1}) == '{"a": 1}'
    assert _stringify(Decimal("9.50")) == '"9.50"'


def test_batch_id_format() -> None:
    """Test batch ids look like batch_<epoch ms>_<9 chars> and are unique."""
    batch_id = generate_batch_id()

    assert re.fullmatch(r"batch_\d{13}_[a-z0-9]{9}", batch_id)
    assert generate_batch_id() != batch_id
