"""
Tests for Field Classifier
"""

from ..tools.field_classifier import (
    classify_fields,
    describe_structure,
    extract_numeric_fields,
    extract_text_fields,
)


class TestClassifyFields:
    """Tests for classify_fields"""

    def test_flat_object(self):
        fields = classify_fields({"temp": 21.5, "city": "Berlin"})

        assert fields.numeric == {"temp": 21.5}
        assert fields.text == {"city": "Berlin"}

    def test_nested_objects_use_dotted_paths(self):
        fields = classify_fields({"main": {"temp": 3, "desc": {"short": "cold"}}})

        assert fields.numeric == {"main.temp": 3}
        assert fields.text == {"main.desc.short": "cold"}

    def test_numeric_walk_descends_into_arrays(self):
        value = {"items": [{"price": 9.5, "label": "a"}, {"price": 3}]}

        assert extract_numeric_fields(value) == {"items.0.price": 9.5, "items.1.price": 3}

    def test_text_walk_skips_nested_arrays(self):
        value = {"items": [{"price": 9.5, "label": "a"}], "title": "shop"}

        assert extract_text_fields(value) == {"title": "shop"}

    def test_root_array_enumerated_by_both_walks(self):
        fields = classify_fields([{"n": 1, "s": "x"}, {"n": 2}])

        assert fields.numeric == {"0.n": 1, "1.n": 2}
        assert fields.text == {"0.s": "x"}

    def test_booleans_are_not_numbers(self):
        fields = classify_fields({"active": True, "count": 0, "flag": False})

        assert fields.numeric == {"count": 0}
        assert fields.text == {}

    def test_empty_strings_and_nulls_skipped(self):
        fields = classify_fields({"a": "", "b": None, "c": "ok"})

        assert fields.text == {"c": "ok"}
        assert fields.numeric == {}

    def test_scalar_root_is_empty(self):
        assert classify_fields(42).is_empty()
        assert classify_fields("hello").is_empty()
        assert classify_fields(None).is_empty()

    def test_idempotent(self):
        value = {"a": [1, {"b": 2}], "c": {"d": "e"}}

        assert classify_fields(value) == classify_fields(value)


class TestDescribeStructure:
    """Tests for describe_structure"""

    def test_object(self):
        assert describe_structure({"a": 1, "b": 2}) == {
            "type": "object",
            "keys": ["a", "b"],
            "array_length": None,
        }

    def test_array(self):
        assert describe_structure([1, 2, 3]) == {"type": "array", "keys": [], "array_length": 3}

    def test_scalar(self):
        assert describe_structure("x")["type"] == "string"
        assert describe_structure(True)["type"] == "bool"


class TestDeepPayloads:
    """Tests for payloads nested beyond the recursion limit"""

    def test_deep_objects(self):
        depth = 5000
        value = {"n": 1}
        for _ in range(depth):
            value = {"a": value}

        fields = classify_fields(value)

        assert fields.numeric == {".".join(["a"] * depth + ["n"]): 1}
        assert fields.text == {}

    def test_deep_arrays(self):
        depth = 5000
        value = ["x"]
        for _ in range(depth):
            value = [value]

        fields = classify_fields({"root": value})

        assert fields.numeric == {}
        assert fields.text == {}

    def test_order_is_depth_first(self):
        fields = classify_fields({"a": {"b": 1, "c": {"d": 2}}, "e": 3})

        assert list(fields.numeric) == ["a.b", "a.c.d", "e"]
