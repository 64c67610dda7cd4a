import pytest
from bson import ObjectId

from submission_store.db.identifiers import is_in_filter, normalize_id


class TestNormalizeId:
    """Test normalize_id function."""

    def test_valid_hex_string_becomes_object_id(self):
        raw = str(ObjectId())
        result = normalize_id(raw)
        assert isinstance(result, ObjectId)
        assert str(result) == raw

    def test_object_id_passes_through_as_equal_object_id(self):
        oid = ObjectId()
        assert normalize_id(oid) == oid

    def test_none_returns_none(self):
        assert normalize_id(None) is None

    @pytest.mark.parametrize("value", ["not-an-id", "1234", 42, 3.5, ["a"], {"$ne": 1}])
    def test_malformed_values_pass_through_unchanged(self, value):
        assert normalize_id(value) == value

    def test_in_filter_normalizes_each_element(self):
        valid = str(ObjectId())
        result = normalize_id({"$in": [valid, "not-an-id"]})
        assert isinstance(result["$in"][0], ObjectId)
        assert str(result["$in"][0]) == valid
        assert result["$in"][1] == "not-an-id"

    def test_in_filter_returns_new_object(self):
        original = {"$in": [str(ObjectId())]}
        result = normalize_id(original)
        assert result is not original
        assert isinstance(original["$in"][0], str)

    @pytest.mark.parametrize("operand", ["abc", 7, None, {"a": 1}])
    def test_in_filter_with_non_list_operand_is_left_alone(self, operand):
        value = {"$in": operand}
        assert normalize_id(value) is value

    def test_in_filter_accepts_tuples(self):
        valid = str(ObjectId())
        assert normalize_id({"$in": (valid,)}) == {"$in": [ObjectId(valid)]}

    def test_nested_in_filters_are_normalized_recursively(self):
        valid = str(ObjectId())
        result = normalize_id({"$in": [{"$in": [valid]}]})
        assert isinstance(result["$in"][0]["$in"][0], ObjectId)


def test_is_in_filter():
    assert is_in_filter({"$in": []}) is True
    assert is_in_filter({"$nin": []}) is False
    assert is_in_filter("abc") is False
