import pytest

from es_importer import ConversionError, Descriptor, IdentifierError, derive_id


class TestDeriveId:
    def test_single_key_returns_string_value(self):
        descriptor = Descriptor(identity_key="user_id")
        assert derive_id(descriptor, {"user_id": 42}) == "42"
        assert derive_id(descriptor, {"user_id": "abc"}) == "abc"

    def test_composite_key_joins_with_dash(self):
        descriptor = Descriptor(identity_key=["user_id", "created_at"])
        assert derive_id(descriptor, {"user_id": 1, "created_at": "today"}) == "1-today"

    def test_missing_field_yields_empty_segment(self):
        descriptor = Descriptor(identity_key=["user_id", "created_at"])
        assert derive_id(descriptor, {"user_id": 1}) == "1-"
        assert derive_id(descriptor, {"created_at": "today"}) == "-today"

    def test_missing_single_key_is_empty(self):
        assert derive_id(Descriptor(identity_key="id"), {}) == ""

    def test_booleans_render_lowercase(self):
        descriptor = Descriptor(identity_key=["id", "active"])
        assert derive_id(descriptor, {"id": 3, "active": False}) == "3-false"

    def test_non_scalar_component_is_rejected(self):
        descriptor = Descriptor(identity_key=["id", "tags"])
        with pytest.raises(IdentifierError) as excinfo:
            derive_id(descriptor, {"id": 1, "tags": ["a"]})
        assert isinstance(excinfo.value, ConversionError)
        assert excinfo.value.field_name == "tags"
