"""Whole-submission evaluation against a form definition."""

from __future__ import annotations

from datetime import datetime, timezone

from forms_service.logic.constraints import DEFAULT_STRATEGIES, NUMERIC_RANGE
from forms_service.logic.submission import REQUIRED_MESSAGE, candidate_value, evaluate_submission
from forms_service.models.form_payloads import CreateFormResponseModel, CreateQuestionResponseModel
from forms_service.models.question_type import QuestionType


def _payload(*answers: CreateQuestionResponseModel, respondent: str | None = "user-1") -> CreateFormResponseModel:
    return CreateFormResponseModel(respondent_user_id=respondent, is_complete=True, question_responses=list(answers))


def _answer(question, value=None, selected=()) -> CreateQuestionResponseModel:
    return CreateQuestionResponseModel(
        question_id=question.question_id,
        response_value=value,
        selected_option_ids=list(selected),
    )


def _age_and_colours(make_question, make_form):
    age = make_question("Number", is_required=True, minimum="18", maximum="120", question_id="q-age")
    colours = make_question("MultipleChoice", options=("Red", "Green", "Blue"), question_id="q-colours")
    return make_form([age, colours]), age, colours


def test_valid_submission_builds_response(make_question, make_form):
    form, age, colours = _age_and_colours(make_question, make_form)
    opt1, _, opt3 = (o.question_option_id for o in colours.options)
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)

    result = evaluate_submission(
        form,
        _payload(_answer(age, "25"), _answer(colours, selected=[opt1, opt3])),
        submitted_on=when,
    )

    assert result.ok
    response = result.response
    assert response.form_id == form.form_id
    assert response.respondent_user_id == "user-1"
    assert response.is_complete is True
    assert response.submitted_on == when
    assert response.answer_for("q-age").response_text == "25"
    assert response.answer_for("q-colours").selected_option_ids == [opt1, opt3]
    assert all(a.form_response_id == response.form_response_id for a in response.answers)


def test_out_of_range_answer_rejects_whole_submission(make_question, make_form):
    form, age, colours = _age_and_colours(make_question, make_form)
    opt1 = colours.options[0].question_option_id

    result = evaluate_submission(form, _payload(_answer(age, "150"), _answer(colours, selected=[opt1])))

    assert not result.ok
    assert result.response is None
    assert result.errors == {"q-age": ["Value must be a number between 18 and 120"]}


def test_typed_client_values_are_canonicalised(make_question, make_form):
    form, age, _ = _age_and_colours(make_question, make_form)
    result = evaluate_submission(form, _payload(_answer(age, 42.0)))
    assert result.ok
    assert result.response.answer_for("q-age").response_text == "42"


def test_small_float_is_stored_without_exponent(make_question, make_form):
    dose = make_question("Number", is_required=True, question_id="q-dose")
    result = evaluate_submission(make_form([dose]), _payload(_answer(dose, 0.00001)))
    assert result.ok, result.errors
    assert result.response.answer_for("q-dose").response_text == "0.00001"


def test_required_choice_with_no_selection(make_question, make_form):
    pick = make_question("SingleChoice", is_required=True, options=("Yes", "No"), question_id="q-pick")
    form = make_form([pick])
    result = evaluate_submission(form, _payload(_answer(pick)))
    assert result.errors == {"q-pick": [REQUIRED_MESSAGE]}


def test_required_scalar_left_blank(make_question, make_form):
    name = make_question("ShortText", is_required=True, question_id="q-name")
    result = evaluate_submission(make_form([name]), _payload(_answer(name, "   ")))
    assert result.errors == {"q-name": [REQUIRED_MESSAGE]}


def test_unanswered_required_question_is_not_flagged(make_question, make_form):
    # Completeness is the client's concern; only submitted answers are checked
    name = make_question("ShortText", is_required=True, question_id="q-name")
    result = evaluate_submission(make_form([name]), _payload())
    assert result.ok
    assert result.response.answers == []


def test_membership_and_duplicate_answers(make_question, make_form):
    form, age, _ = _age_and_colours(make_question, make_form)
    stranger = make_question("Number", question_id="q-other", form_id="other")

    result = evaluate_submission(form, _payload(_answer(age, "30"), _answer(age, "31"), _answer(stranger, "1")))

    assert result.errors == {
        "q-age": ["Question was answered more than once"],
        "q-other": ["Question q-other does not belong to this form"],
    }


def test_shape_errors_are_reported_per_question(make_question, make_form):
    form, age, colours = _age_and_colours(make_question, make_form)
    result = evaluate_submission(
        form,
        _payload(_answer(age, "30", selected=["x"]), _answer(colours, value="Red")),
    )
    assert result.errors["q-age"] == [
        "Question type 'Number' does not accept option selections; send a response value"
    ]
    assert result.errors["q-colours"] == [
        "Question type 'MultipleChoice' expects selected options, not a response value"
    ]


def test_candidate_value_joins_selections(make_question):
    colours = make_question("MultipleChoice", options=("Red", "Green"))
    ids = [o.question_option_id for o in colours.options]
    assert candidate_value(colours, _answer(colours, selected=ids)) == ",".join(ids)
    assert candidate_value(colours, _answer(colours)) is None


def test_strict_unknown_types(make_question, make_form):
    custom = QuestionType(question_type_id="sig", code="Signature", name="Signature", input_type="canvas")
    question = make_question("ShortText", question_id="q-sig").model_copy(update={"question_type": custom})
    form = make_form([question])

    assert evaluate_submission(form, _payload(_answer(question, "scribble"))).ok
    strict = evaluate_submission(form, _payload(_answer(question, "scribble")), strict_unknown_types=True)
    assert strict.errors == {"q-sig": ["Question type 'Signature' is not supported"]}


def test_custom_strategy_map_is_honoured(make_question, make_form):
    custom = QuestionType(question_type_id="pct", code="Percentage", name="Percentage", input_type="number")
    question = make_question("Number", question_id="q-pct").model_copy(
        update={"question_type": custom, "minimum_value": "0", "maximum_value": "100"}
    )
    strategies = DEFAULT_STRATEGIES.copy()
    strategies.register_strategy("Percentage", NUMERIC_RANGE)

    result = evaluate_submission(make_form([question]), _payload(_answer(question, "150")), strategies=strategies)

    assert result.errors == {"q-pct": ["Value must be a number between 0 and 100"]}
