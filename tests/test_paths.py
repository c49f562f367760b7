"""
Tests for definition path helpers
"""

from callreach.ir.paths import (
    has_generic_delimiter,
    is_concrete_type,
    strip_generic_args,
    substitute_type_params,
)


class TestStripGenericArgs:
    """Test removal of generic segments"""

    def test_single_segment(self):
        assert strip_generic_args("DataStore::<Electronics>::total_value") == "DataStore::total_value"

    def test_nested_and_trailing_segments(self):
        path = "DataStore::<Vec<u8>>::calculate_value_with_strategy::<{closure@DataStore::<u8>::total_value}>"
        assert strip_generic_args(path) == "DataStore::calculate_value_with_strategy"

    def test_arrow_inside_arguments(self):
        assert strip_generic_args("apply::<fn(u8) -> u8>::run") == "apply::run"

    def test_qualified_self_is_kept(self):
        assert strip_generic_args("<Electronics as Product>::price") == "<Electronics as Product>::price"

    def test_plain_path(self):
        assert strip_generic_args("main") == "main"


class TestSubstituteTypeParams:
    """Test generic parameter substitution"""

    def test_replaces_whole_identifiers_only(self):
        result = substitute_type_params("Vec<T, Tx>", {"T": "u32"})
        assert result == "Vec<u32, Tx>"

    def test_generic_only_leaves_path_segments(self):
        result = substitute_type_params("T::<T>::new", {"T": "u32"}, generic_only=True)
        assert result == "T::<u32>::new"

    def test_qualified_self(self):
        result = substitute_type_params("<Self as Product>::price", {"Self": "Clothing"}, generic_only=True)
        assert result == "<Clothing as Product>::price"

    def test_empty_mapping(self):
        assert substitute_type_params("DataStore::<T>::len", {}) == "DataStore::<T>::len"


class TestConcreteTypes:
    """Test detection of unbound type arguments"""

    def test_concrete(self):
        assert is_concrete_type("Electronics")
        assert is_concrete_type("Vec<my_type>")

    def test_inference_placeholder(self):
        assert not is_concrete_type("_")
        assert not is_concrete_type("Vec<_>")

    def test_empty(self):
        assert not is_concrete_type("")

    def test_unbound_parameters(self):
        assert not is_concrete_type("T", ["T"])
        assert not is_concrete_type("Wrapper<T>", ["T"])
        assert is_concrete_type("Target", ["T"])
        assert is_concrete_type("T")

    def test_generic_delimiter(self):
        assert has_generic_delimiter("DataStore::<Electronics>::total_value")
        assert not has_generic_delimiter("DataStore::total_value")
