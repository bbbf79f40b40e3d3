"""Form engine tests — coercion, rendering, validation and submit.

Edits never produce errors; invalid input leaves a field unset.  Errors
appear only after an explicit submit/validate and are keyed by field id.
"""

from datetime import date, time

import pytest

from stepladder_worksheets.errors import ReadOnlyFormError
from stepladder_worksheets.forms import (
    WorksheetForm,
    clinician_config_form,
    coerce_value,
    effective_values,
    normalize_values,
    render_form,
    validate_values,
)

OPTIONS = [
    {"value": "a", "label": "Alpha"},
    {"value": "b", "label": "Beta"},
    {"value": "c", "label": "Gamma"},
]


@pytest.fixture
def every_type(make_template):
    """One optional field of every type."""
    return make_template([
        {"id": "text", "label": "Text", "type": "text"},
        {"id": "area", "label": "Area", "type": "textarea"},
        {"id": "num", "label": "Num", "type": "number", "min": 0, "max": 100, "step": 5},
        {"id": "rate", "label": "Rate", "type": "rating_0_10"},
        {"id": "box", "label": "Box", "type": "checkbox"},
        {"id": "group", "label": "Group", "type": "checkbox_group", "options": OPTIONS},
        {"id": "sel", "label": "Sel", "type": "select", "options": OPTIONS},
        {"id": "multi", "label": "Multi", "type": "multi_select", "options": OPTIONS},
        {"id": "day", "label": "Day", "type": "date"},
        {"id": "clock", "label": "Clock", "type": "time"},
        {"id": "scale", "label": "Scale", "type": "likert", "options": OPTIONS},
    ])


# =====================================================================
# Coercion
# =====================================================================


class TestCoercion:

    def _coerce(self, template, field_id, raw):
        return coerce_value(template.get_field(field_id), raw)

    @pytest.mark.parametrize("raw,expected", [
        ("42", 42),
        (" 7.5 ", 7.5),
        (3, 3),
        (2.25, 2.25),
    ])
    def test_number_valid(self, every_type, raw, expected):
        assert self._coerce(every_type, "num", raw) == (True, expected)

    @pytest.mark.parametrize("raw", ["", "abc", None, True, "nan", float("inf"), [1]])
    def test_number_invalid_is_unset(self, every_type, raw):
        assert self._coerce(every_type, "num", raw) == (False, None)

    def test_number_out_of_range_kept_while_editing(self, every_type):
        """Bounds are a submit-time check."""
        assert self._coerce(every_type, "num", "250") == (True, 250)

    @pytest.mark.parametrize("raw,expected", [(0, 0), ("7", 7), (10, 10), (4.0, 4)])
    def test_rating_valid(self, every_type, raw, expected):
        assert self._coerce(every_type, "rate", raw) == (True, expected)

    @pytest.mark.parametrize("raw", [-1, 11, "x", 3.5, None])
    def test_rating_invalid_is_unset(self, every_type, raw):
        assert self._coerce(every_type, "rate", raw) == (False, None)

    @pytest.mark.parametrize("raw,expected", [
        (True, True), (False, False), ("on", True), ("false", False), (None, False), (1, True),
    ])
    def test_checkbox(self, every_type, raw, expected):
        assert self._coerce(every_type, "box", raw) == (True, expected)

    def test_checkbox_group_keeps_known_options_in_option_order(self, every_type):
        assert self._coerce(every_type, "group", ["c", "zzz", "a"]) == (True, ["a", "c"])
        assert self._coerce(every_type, "multi", "b") == (True, ["b"])
        assert self._coerce(every_type, "multi", []) == (True, [])

    def test_select_and_likert_reject_unknown_options(self, every_type):
        assert self._coerce(every_type, "sel", "b") == (True, "b")
        assert self._coerce(every_type, "sel", "nope") == (False, None)
        assert self._coerce(every_type, "scale", "c") == (True, "c")
        assert self._coerce(every_type, "scale", None) == (False, None)

    def test_likert_numeric_option_values(self, store):
        field = store.get_by_id("cbt-cognitive-distortions").get_field("belief")
        assert coerce_value(field, 3) == (True, "3")

    @pytest.mark.parametrize("raw,expected", [
        ("2024-02-29", "2024-02-29"),
        (date(2024, 1, 5), "2024-01-05"),
    ])
    def test_date_valid(self, every_type, raw, expected):
        assert self._coerce(every_type, "day", raw) == (True, expected)

    @pytest.mark.parametrize("raw", ["2023-02-29", "01/05/2024", "2024-1-5", "", 20240105])
    def test_date_invalid(self, every_type, raw):
        assert self._coerce(every_type, "day", raw) == (False, None)

    @pytest.mark.parametrize("raw,expected", [
        ("07:30", "07:30"),
        ("23:59:10", "23:59"),
        (time(9, 5), "09:05"),
    ])
    def test_time_valid(self, every_type, raw, expected):
        assert self._coerce(every_type, "clock", raw) == (True, expected)

    @pytest.mark.parametrize("raw", ["24:00", "7:30", "noon", ""])
    def test_time_invalid(self, every_type, raw):
        assert self._coerce(every_type, "clock", raw) == (False, None)

    def test_text_stringifies(self, every_type):
        assert self._coerce(every_type, "text", 12) == (True, "12")
        assert self._coerce(every_type, "area", "") == (True, "")


# =====================================================================
# Rendering
# =====================================================================


class TestRender:

    def test_controls_per_type(self, every_type):
        view = render_form(every_type, {})
        controls = {f.id: f.control for f in view.fields}
        assert controls == {
            "text": "text_input",
            "area": "textarea",
            "num": "number_input",
            "rate": "bucket_scale",
            "box": "checkbox",
            "group": "checkbox_group",
            "sel": "dropdown",
            "multi": "multi_dropdown",
            "day": "date_input",
            "clock": "time_input",
            "scale": "radio_group",
        }

    def test_rating_renders_eleven_buckets(self, every_type):
        view = render_form(every_type, {"rate": 4})
        rate = next(f for f in view.fields if f.id == "rate")
        assert [o.value for o in rate.options] == [str(i) for i in range(11)]
        assert [o.value for o in rate.options if o.selected] == ["4"]

    def test_option_selection_marked(self, every_type):
        view = render_form(every_type, {"group": ["a", "c"], "sel": "b"})
        fields = {f.id: f for f in view.fields}
        assert [o.selected for o in fields["group"].options] == [True, False, True]
        assert [o.selected for o in fields["sel"].options] == [False, True, False]
        assert [o.label for o in fields["sel"].options] == ["Alpha", "Beta", "Gamma"]

    def test_unset_values(self, every_type):
        fields = {f.id: f for f in render_form(every_type, {}).fields}
        assert fields["box"].value is False
        assert fields["group"].value == []
        assert fields["text"].value is None

    def test_number_constraints(self, every_type):
        num = next(f for f in render_form(every_type, {}).fields if f.id == "num")
        assert num.constraints == {"min": 0, "max": 100, "step": 5}

    def test_field_order_and_metadata(self, store):
        template = store.get_by_id("cbt-thought-record")
        view = render_form(template, {})
        assert [f.id for f in view.fields] == template.field_ids
        assert view.fields[0].required is True
        assert view.fields[0].placeholder
        assert view.title == template.title

    def test_read_only_disables_everything(self, every_type):
        view = render_form(every_type, {}, read_only=True)
        assert view.read_only and not view.submittable
        assert all(f.disabled for f in view.fields)

    def test_option_field_without_options_renders_nothing(self, every_type):
        broken = every_type.fields[6].model_construct(
            id="empty", label="Empty", type="select", options=[]
        )
        template = every_type.model_copy(update={"fields": [every_type.fields[0], broken]})
        assert [f.id for f in render_form(template, {}).fields] == ["text"]


# =====================================================================
# Validation and submit
# =====================================================================


class TestSubmit:

    def test_required_text_scenario(self, make_template):
        """Empty map fails for x; a non-empty value submits."""
        template = make_template([{"id": "x", "label": "X", "type": "text", "required": True}])
        form = WorksheetForm(template)
        result = form.submit()
        assert not result.ok
        assert result.errors == {"x": "X is required"}
        assert result.values == {}

        form.set_value("x", "non-empty")
        result = form.submit()
        assert result.ok
        assert result.values == {"x": "non-empty"}
        assert result.errors == {}

    def test_empty_string_counts_as_unset(self, make_template):
        template = make_template([{"id": "x", "label": "X", "type": "textarea", "required": True}])
        assert validate_values(template, {"x": ""}) == {"x": "X is required"}

    def test_required_checkbox_fails_only_when_missing(self, make_template):
        template = make_template([{"id": "ok", "label": "Agree", "type": "checkbox", "required": True}])
        assert validate_values(template, {}) == {"ok": "Agree is required"}
        assert validate_values(template, {"ok": ""}) == {"ok": "Agree is required"}
        assert validate_values(template, {"ok": False}) == {}
        assert validate_values(template, {"ok": True}) == {}

    def test_raw_numeric_strings_are_coerced(self, every_type):
        assert validate_values(every_type, {"num": "5"}) == {}
        assert validate_values(every_type, {"num": "250"}) == {
            "num": "Num must be between 0 and 100"
        }

    def test_uncoercible_input_is_reported(self, every_type):
        errors = validate_values(every_type, {"num": "abc", "day": "2024-13-40"})
        assert set(errors) == {"num", "day"}
        assert errors["num"].endswith("has an invalid value")

    def test_rating_out_of_range_reported(self, make_template):
        template = make_template([{"id": "r", "label": "R", "type": "rating_0_10"}])
        assert validate_values(template, {"r": 42}) == {"r": "R must be between 0 and 10"}
        assert validate_values(template, {"r": "7"}) == {}

    def test_required_group_needs_a_choice(self, make_template):
        template = make_template([
            {"id": "g", "label": "G", "type": "checkbox_group", "options": OPTIONS, "required": True},
        ])
        assert validate_values(template, {"g": []}) == {"g": "G is required"}
        assert validate_values(template, {"g": ["a"]}) == {}

    def test_rating_zero_is_a_value(self, make_template):
        template = make_template([{"id": "r", "label": "R", "type": "rating_0_10", "required": True}])
        assert validate_values(template, {"r": 0}) == {}

    def test_number_bounds_checked_on_submit(self, every_type):
        assert validate_values(every_type, {"num": 250}) == {
            "num": "Num must be between 0 and 100"
        }
        assert validate_values(every_type, {"num": 100}) == {}

    def test_errors_only_for_failing_fields(self, store):
        form = WorksheetForm(store.get_by_id("cbt-thought-record"))
        form.set_value("situation", "At work")
        result = form.submit()
        assert set(result.errors) == {"mood", "automatic_thought"}

    def test_edit_clears_field_error(self, make_template):
        template = make_template([
            {"id": "x", "label": "X", "type": "text", "required": True},
            {"id": "y", "label": "Y", "type": "text", "required": True},
        ])
        form = WorksheetForm(template)
        form.submit()
        assert set(form.errors) == {"x", "y"}
        form.set_value("x", "filled")
        assert set(form.errors) == {"y"}
        assert form.render().fields[1].error == "Y is required"

    def test_invalid_edit_unsets_value(self, every_type):
        form = WorksheetForm(every_type, {"num": 5})
        assert form.set_value("num", "five") is True
        assert "num" not in form.values
        assert form.errors == {}

    def test_unknown_field_raises(self, every_type):
        form = WorksheetForm(every_type)
        with pytest.raises(KeyError):
            form.set_value("missing", "x")

    def test_toggle_option(self, every_type):
        form = WorksheetForm(every_type)
        form.toggle_option("group", "c", True)
        form.toggle_option("group", "a", True)
        assert form.values["group"] == ["a", "c"]
        form.toggle_option("group", "c", False)
        assert form.values["group"] == ["a"]
        with pytest.raises(ValueError):
            form.toggle_option("sel", "a", True)


class TestReadOnly:

    def test_edits_ignored(self, every_type):
        form = WorksheetForm(every_type, {"text": "kept"}, read_only=True)
        assert form.set_value("text", "changed") is False
        assert form.values == {"text": "kept"}

    def test_submit_raises(self, every_type):
        form = WorksheetForm(every_type, read_only=True)
        with pytest.raises(ReadOnlyFormError):
            form.submit()


# =====================================================================
# Defaults
# =====================================================================


def test_effective_values_response_wins():
    merged = effective_values({"a": 1, "b": 2}, {"b": 3, "c": 4})
    assert merged == {"a": 1, "b": 3, "c": 4}
    assert effective_values(None, None) == {}


def test_defaults_are_normalized(every_type):
    form = WorksheetForm(every_type, {"rate": "7", "sel": "nope", "stale": "x"})
    assert form.values == {"rate": 7}


def test_normalize_values_restricted_fields(store):
    template = store.get_by_id("erp-exposure-run")
    values = normalize_values(
        template,
        {"exposure_task": "Touch doorknob", "suds_before": 40},
        fields=template.configurable_fields(),
    )
    assert values == {"exposure_task": "Touch doorknob"}


def test_clinician_config_form_only_configurable(store):
    template = store.get_by_id("cbtj-stimulus-control-plan")
    form = clinician_config_form(template, {"prescribed_bedtime": "23:00"})
    ids = [f.id for f in form.render().fields]
    assert ids == ["prescribed_bedtime", "prescribed_wake_time"]
    assert form.values == {"prescribed_bedtime": "23:00"}
    result = form.submit()
    assert result.errors == {"prescribed_wake_time": "Prescribed wake time is required"}
