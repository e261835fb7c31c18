"""Tests for Pydantic model validation in control_models.py."""

import pytest
from pydantic import TypeAdapter, ValidationError


class TestFieldDescriptor:
    def test_discriminated_by_kind(self):
        from control_models import FieldDescriptor, NamedField, ScriptedField
        adapter = TypeAdapter(FieldDescriptor)
        named = adapter.validate_python({"kind": "named", "name": "status", "type": "string"})
        scripted = adapter.validate_python({
            "kind": "scripted", "name": "hour", "type": "number",
            "script": "1", "lang": "painless",
        })
        assert isinstance(named, NamedField)
        assert isinstance(scripted, ScriptedField)
        assert not named.scripted
        assert scripted.scripted

    def test_scripted_without_script_rejected(self):
        from control_models import ScriptedField
        with pytest.raises(ValidationError):
            ScriptedField(name="hour", type="number", script="", lang="painless")

    def test_scripted_without_lang_rejected(self):
        from control_models import ScriptedField
        with pytest.raises(ValidationError):
            ScriptedField(name="hour", type="number", script="1")

    def test_value_type_number_is_float(self):
        from control_models import ScriptedField
        f = ScriptedField(name="hour", type="number", script="1", lang="painless")
        assert f.value_type == "float"

    def test_value_type_passthrough(self):
        from control_models import ScriptedField
        f = ScriptedField(name="day", type="string", script="'mon'", lang="painless")
        assert f.value_type == "string"


class TestIndexPattern:
    def test_by_name(self, make_index_pattern):
        ip = make_index_pattern()
        assert ip.by_name["status"].type == "string"
        assert ip.by_name["hour"].scripted

    def test_get_field_missing_raises(self, make_index_pattern):
        from errors import FieldLookupError
        ip = make_index_pattern()
        with pytest.raises(FieldLookupError) as exc:
            ip.get_field("nope")
        assert "nope" in str(exc.value)
        assert "logs-*" in str(exc.value)


class TestControlParams:
    def test_defaults(self):
        from control_models import ControlParams
        p = ControlParams(id="c", field_name="status", index_pattern="dv")
        assert p.type == "list"
        assert p.options.size == 5
        assert p.options.dynamic_options is True
        assert p.options.multiselect is True

    def test_empty_field_name_rejected(self):
        from control_models import ControlParams
        with pytest.raises(ValidationError):
            ControlParams(id="c", field_name="", index_pattern="dv")

    def test_only_list_type(self):
        from control_models import ControlParams
        with pytest.raises(ValidationError):
            ControlParams(id="c", field_name="status", index_pattern="dv", type="range")


class TestControlState:
    def test_enabled_state(self):
        from control_models import ControlState
        s = ControlState(options=("a", "b"), enabled=True)
        assert s.options == ("a", "b")
        assert s.disabled_reason == ""

    def test_disabled_without_reason_rejected(self):
        from control_models import ControlState
        with pytest.raises(ValidationError):
            ControlState(enabled=False)

    def test_enabled_with_reason_rejected(self):
        from control_models import ControlState
        with pytest.raises(ValidationError):
            ControlState(options=("a",), enabled=True, disabled_reason="why")

    def test_frozen(self):
        from control_models import ControlState
        s = ControlState(options=("a",), enabled=True)
        with pytest.raises(ValidationError):
            s.enabled = False

    def test_numeric_options_keep_type(self):
        from control_models import ControlState
        s = ControlState(options=(200, 404), enabled=True)
        assert s.options == (200, 404)
        assert isinstance(s.options[0], int)


class TestTimeRange:
    def test_from_alias(self):
        from control_models import TimeRange
        tr = TimeRange.model_validate({"from": "now-15m", "to": "now"})
        assert tr.from_ == "now-15m"

    def test_to_defaults_to_now(self):
        from control_models import TimeRange
        assert TimeRange(from_="now-1h").to == "now"
