from app.jokes.modules.jokes.service import (
    FORM_NOT_SUBMITTED,
    JokeFieldErrors,
    JokeFields,
    NewJokeActionData,
    parse_joke_form,
    validate_joke_content,
    validate_joke_name,
)


def test_validate_joke_name_enforces_minimum_length():
    for name in ("", "a", "ab"):
        assert validate_joke_name(name)
    for name in ("abc", "Good one", "x" * 200):
        assert validate_joke_name(name) is None


def test_validate_joke_content_enforces_minimum_length():
    for content in ("", "short", "123456789"):
        assert validate_joke_content(content)
    for content in ("1234567890", "This is definitely long enough"):
        assert validate_joke_content(content) is None


def test_parse_joke_form_returns_fields_when_valid():
    result = parse_joke_form({"name": "Good one", "content": "This is definitely long enough"})
    assert result == JokeFields(name="Good one", content="This is definitely long enough")


def test_parse_joke_form_runs_both_validators():
    result = parse_joke_form({"name": "a", "content": "short"})
    assert isinstance(result, NewJokeActionData)
    assert result.form_error is None
    assert result.fields == JokeFields(name="a", content="short")
    assert result.field_errors == JokeFieldErrors(
        name="Joke name must be at least 3 characters long",
        content="Joke content must be at least 10 characters long",
    )


def test_parse_joke_form_rejects_missing_or_non_text_values():
    for form in ({"name": "Good one"}, {"content": "This is definitely long enough"}, {"name": 3, "content": "x" * 20}):
        result = parse_joke_form(form)
        assert result == NewJokeActionData(field_errors=None, fields=None, form_error=FORM_NOT_SUBMITTED)


def test_action_data_to_dict_shape():
    data = NewJokeActionData(
        field_errors=JokeFieldErrors(name="bad"),
        fields=JokeFields(name="a", content="b"),
        form_error=None,
    )
    assert data.to_dict() == {
        "fieldErrors": {"name": "bad", "content": None},
        "fields": {"name": "a", "content": "b"},
        "formError": None,
    }
    assert NewJokeActionData(None, None, FORM_NOT_SUBMITTED).to_dict() == {
        "fieldErrors": None,
        "fields": None,
        "formError": FORM_NOT_SUBMITTED,
    }
