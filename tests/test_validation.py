"""Answer validation — required handling and per-kind checks."""

import pytest

from survey_runtime.validation import check_answer, is_empty

from helpers.builders import choice, make_survey, multi, rating, scale, text


def _q(raw):
    """Validate a single raw question dict."""
    return make_survey(raw).questions[0]


class TestIsEmpty:

    @pytest.mark.parametrize("value", [None, "", "   ", [], ()])
    def test_empty(self, value):
        assert is_empty(value) is True

    @pytest.mark.parametrize("value", [0, 0.0, "x", ["A"], False])
    def test_not_empty(self, value):
        assert is_empty(value) is False


class TestRequired:

    @pytest.mark.parametrize("value", [None, "", "  ", []])
    def test_required_rejects_empty(self, value):
        result = check_answer(_q(text("q1")), value)
        assert result.ok is False
        assert result.reason == "required"

    @pytest.mark.parametrize("value", [None, "", []])
    def test_optional_accepts_empty(self, value):
        assert check_answer(_q(text("q1", required=False)), value).ok is True

    def test_multi_select_required(self):
        """An empty selection is rejected; a single option is accepted."""
        q = _q(multi("q1", ["A", "B"]))
        assert check_answer(q, []).reason == "required"
        assert check_answer(q, ["A"]).ok is True


class TestKinds:

    @pytest.mark.parametrize("value", [1, 5, 10, 7.0])
    def test_scale_in_range(self, value):
        assert check_answer(_q(scale("q1", min=1, max=10)), value).ok is True

    @pytest.mark.parametrize("value", [0, 11, 2.5, "5", True])
    def test_scale_invalid(self, value):
        result = check_answer(_q(scale("q1", min=1, max=10)), value)
        assert result.ok is False
        assert result.reason == "invalid"

    def test_rating_bounds(self):
        q = _q(rating("q1"))
        assert check_answer(q, 5).ok is True
        assert check_answer(q, 6).reason == "invalid"

    def test_text_must_be_string(self):
        q = _q(text("q1"))
        assert check_answer(q, "hello").ok is True
        assert check_answer(q, 42).reason == "invalid"

    def test_choice_must_be_an_option(self):
        q = _q(choice("q1", ["Yes", "No"]))
        assert check_answer(q, "Yes").ok is True
        assert check_answer(q, "Maybe").reason == "invalid"
        assert check_answer(q, ["Yes"]).reason == "invalid"

    def test_multi_select_values(self):
        q = _q(multi("q1", ["A", "B", "C"]))
        assert check_answer(q, ["A", "C"]).ok is True
        assert check_answer(q, ("B",)).ok is True
        assert check_answer(q, ["A", "Z"]).reason == "invalid"
        assert check_answer(q, ["A", "A"]).reason == "invalid"
        assert check_answer(q, "A").reason == "invalid"
