from resume_analyzer.layout_utils import (
    ReconstructionConfig,
    join_runs,
    lines_to_text,
    normalize_runs,
    reconstruct,
    reconstruct_lines,
)
from resume_analyzer.types import GlyphRun


def _make_item(text, x, y, width=None):
    item = {"text": text, "x": x, "y": y}
    if width is not None:
        item["width"] = width
    return item


def test_normalize_drops_empty_and_keeps_unpositioned_text():
    runs = normalize_runs(
        [
            _make_item("Name", 10, 700),
            _make_item("   ", 50, 700),
            {"text": None, "x": 1, "y": 1},
            "not an item",
            {"text": "Orphan"},
            {"text": "Bad", "x": "left", "y": 3},
            {"text": "NaN", "x": float("nan"), "y": 3},
        ]
    )

    assert [run.text for run in runs] == ["Name", "Orphan", "Bad", "NaN"]
    assert runs[0].positioned
    assert not any(run.positioned for run in runs[1:])


def test_normalize_estimates_width_when_missing():
    runs = normalize_runs([_make_item("abcd", 0, 0), _make_item("ab", 0, 0, width=30)])

    assert runs[0].estimated_width == 24
    assert runs[1].estimated_width == 30


def test_upper_row_precedes_lower_row():
    items = [_make_item("lower", 0, 80), _make_item("upper", 0, 100)]

    assert lines_to_text(reconstruct(items)) == "upper\nlower"


def test_runs_on_a_line_are_ordered_left_to_right():
    items = [_make_item("world", 60, 100), _make_item("hello", 0, 100)]

    lines = reconstruct(items)
    assert len(lines) == 1
    assert lines[0].text == "hello world"


def test_closing_punctuation_gets_no_space():
    items = [_make_item("Hello", 0, 100, width=25), _make_item(".", 25, 100)]

    assert lines_to_text(reconstruct(items)) == "Hello."


def test_all_closing_punctuation_characters_attach():
    runs = [GlyphRun("word", 0, 0, 24)] + [
        GlyphRun(char, 30 + index, 0, 6) for index, char in enumerate(".,!?;:)}]")
    ]

    assert join_runs(runs) == "word.,!?;:)}]"


def test_runs_within_tolerance_share_a_line():
    items = [
        _make_item("c", 20, 98),
        _make_item("a", 0, 100),
        _make_item("b", 10, 102),
        _make_item("d", 0, 90),
    ]

    lines = reconstruct(items)
    assert [line.text for line in lines] == ["a b c", "d"]


def test_first_run_seeds_the_cluster():
    # 100 seeds the line; 96 is within 5 of the seed, 92 is not.
    items = [_make_item("one", 0, 100), _make_item("two", 10, 96), _make_item("three", 20, 92)]

    lines = reconstruct(items)
    assert [line.text for line in lines] == ["one two", "three"]


def test_single_run_and_same_height_runs_make_one_line():
    assert [line.text for line in reconstruct([_make_item("Solo", 5, 5)])] == ["Solo"]

    items = [_make_item(word, index * 40, 300) for index, word in enumerate(["a", "b", "c"])]
    assert [line.text for line in reconstruct(items)] == ["a b c"]


def test_unpositioned_runs_follow_the_preceding_positioned_run():
    items = [
        _make_item("Top", 0, 200),
        {"text": "tail"},
        _make_item("Bottom", 0, 100),
        {"text": "end"},
    ]

    lines = reconstruct(items)
    assert [line.text for line in lines] == ["Top tail", "Bottom end"]


def test_leading_unpositioned_run_joins_first_line():
    items = [{"text": "Lead"}, _make_item("Below", 0, 10), _make_item("Above", 0, 50)]

    lines = reconstruct(items)
    assert [line.text for line in lines] == ["Above Lead", "Below"]


def test_no_positioned_runs_keeps_encounter_order():
    lines = reconstruct([{"text": "b"}, {"text": "a"}])

    assert [line.text for line in lines] == ["b a"]


def test_empty_input_yields_no_lines():
    assert reconstruct([]) == []
    assert reconstruct_lines([]) == []


def test_join_gap_glues_fragmented_words():
    config = ReconstructionConfig(join_gap=1.0)
    items = [
        _make_item("Engin", 0, 100, width=30),
        _make_item("eer", 30.5, 100, width=18),
        _make_item("Python", 80, 100, width=36),
    ]

    assert lines_to_text(reconstruct(items, config)) == "Engineer Python"
    assert lines_to_text(reconstruct(items)) == "Engin eer Python"


def test_contact_rows_reconstruct_in_reading_order():
    items = [
        _make_item("john@x.com", 0, 80),
        _make_item("John Doe", 0, 100),
        _make_item("555-123-4567", 80, 80),
    ]

    assert lines_to_text(reconstruct(items)) == "John Doe\njohn@x.com 555-123-4567"
