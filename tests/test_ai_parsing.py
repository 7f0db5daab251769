import pytest

from lifetasks.models.task import Priority
from lifetasks.schemas.ai import MAX_OFFSET_DAYS, coerce_offset_days, normalize_priority
from lifetasks.services.ai_parsing import (
    ParseFailure,
    extract_json_fragment,
    parse_breakdown,
    parse_prioritization,
    parse_suggestion,
)

pytestmark = pytest.mark.unit


def test_breakdown_strict_json_object():
    text = (
        '{"subtasks": ['
        '{"title": "Measure kitchen", "description": "All walls", "priority": "High", "dueDateOffsetDays": 1},'
        '{"title": "Pick cabinets", "priority": "medium", "dueDateOffsetDays": "4"}'
        "]}"
    )

    proposals = parse_breakdown(text)

    assert [p.title for p in proposals] == ["Measure kitchen", "Pick cabinets"]
    assert proposals[0].priority == Priority.HIGH
    assert proposals[0].due_date_offset_days == 1
    assert proposals[1].due_date_offset_days == 4
    assert proposals[1].description is None


def test_breakdown_bare_array():
    proposals = parse_breakdown('[{"title": "Only step"}]')

    assert len(proposals) == 1
    assert proposals[0].priority == Priority.MEDIUM
    assert proposals[0].due_date_offset_days is None


def test_breakdown_fenced_json_inside_prose():
    text = (
        "Sure! Here is the plan:\n"
        "```json\n"
        '{"steps": [{"title": "Call plumber", "priority": "critical"}]}\n'
        "```\n"
        "Good luck!"
    )

    proposals = parse_breakdown(text)

    assert [p.title for p in proposals] == ["Call plumber"]
    # Unknown priority text is normalized, not rejected
    assert proposals[0].priority == Priority.MEDIUM


def test_breakdown_unfenced_object_inside_prose():
    text = 'I suggest {"subtasks": [{"title": "Book van", "dueInDays": 2}]} as a start.'

    proposals = parse_breakdown(text)

    assert proposals[0].title == "Book van"
    assert proposals[0].due_date_offset_days == 2


def test_breakdown_drops_entries_without_title():
    proposals = parse_breakdown('[{"title": "  "}, {"description": "no title"}, {"title": "Keep"}, 7]')

    assert [p.title for p in proposals] == ["Keep"]


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "I could not think of anything useful.",
        '{"message": "no list here"}',
        '[{"title": ""}]',
    ],
)
def test_breakdown_failures(text):
    assert isinstance(parse_breakdown(text), ParseFailure)


def test_extract_json_fragment_skips_unbalanced_braces():
    assert extract_json_fragment('use {curly} notation then [1, 2]') == [1, 2]
    assert extract_json_fragment("nothing here") is None


def test_prioritization_normalizes_entries():
    text = (
        '{"tasks": ['
        '{"id": "t1", "title": " Taxes ", "priority": "HIGH", "reasoning": "Deadline is close"},'
        '{"title": "Gym", "priority": "whenever"},'
        '{"priority": "low"}'
        "]}"
    )

    entries = parse_prioritization(text)

    assert entries == [
        {"id": "t1", "title": "Taxes", "priority": "high", "reasoning": "Deadline is close"},
        {"id": None, "title": "Gym", "priority": "medium", "reasoning": ""},
    ]


def test_prioritization_failure_on_prose():
    assert isinstance(parse_prioritization("Do the taxes first."), ParseFailure)


def test_suggestion_plain_text_passes_through():
    assert parse_suggestion("  Call the bank early in the morning.  ") == "Call the bank early in the morning."


def test_suggestion_unwraps_json_envelope():
    assert parse_suggestion('{"suggestions": "Bring ID."}') == "Bring ID."
    assert parse_suggestion('{"suggestions": ["Bring ID", "Arrive early"]}') == "- Bring ID\n- Arrive early"


def test_suggestion_failures():
    assert isinstance(parse_suggestion("   "), ParseFailure)
    assert isinstance(parse_suggestion('{"unrelated": 1}'), ParseFailure)


@pytest.mark.parametrize(
    "value, expected",
    [("HIGH", "high"), (" Low ", "low"), ("medium", "medium"), ("urgent", "medium"), (None, "medium"), (3, "medium")],
)
def test_normalize_priority(value, expected):
    assert normalize_priority(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, 3),
        (2.0, 2),
        ("5", 5),
        ("+1", 1),
        (-1, None),
        ("soon", None),
        (True, None),
        (None, None),
        (float("inf"), None),
        (float("nan"), None),
        (99999999, MAX_OFFSET_DAYS),
        ("99999999", MAX_OFFSET_DAYS),
    ],
)
def test_coerce_offset_days(value, expected):
    assert coerce_offset_days(value) == expected


def test_breakdown_non_finite_offset_is_dropped():
    proposals = parse_breakdown('{"subtasks": [{"title": "a", "dueDateOffsetDays": Infinity}]}')

    assert proposals[0].due_date_offset_days is None
