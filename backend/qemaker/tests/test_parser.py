"""Tests for turning pasted quiz text into questions."""

import pathlib
import sys

# Allow importing the qemaker package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from qemaker.parser import parse_quiz_report, parse_quiz_text
from qemaker.schemas import QuizOption


SAMPLE = """
1. 2+2?
a. 3
b. 4 - correct
c. 5
=====
"""


def test_single_question_with_correct_marker():
    questions = parse_quiz_text(SAMPLE)
    assert len(questions) == 1
    q = questions[0]
    assert q.number == 1
    assert q.question == "2+2?"
    assert q.options == [
        QuizOption(label="a", text="3"),
        QuizOption(label="b", text="4"),
        QuizOption(label="c", text="5"),
    ]
    assert q.correct_answer == "b"


def test_typed_numerals_are_ignored():
    text = """
5. First?
a. yes - correct
b. no
======
9) Second?
a) up
b) down correct
"""
    questions = parse_quiz_text(text)
    assert [q.number for q in questions] == [1, 2]
    assert [q.question for q in questions] == ["First?", "Second?"]
    assert questions[1].correct_answer == "b"
    assert questions[1].options[1].text == "down"


def test_marker_variants_are_stripped():
    text = """1. Capital of France?
a. Lyon
b. Paris - correct
c. Nice"""
    q = parse_quiz_text(text)[0]
    assert q.options[1] == QuizOption(label="b", text="Paris")
    assert q.correct_answer == "b"

    for line in ["B. Paris-correct", "b) Paris CORRECT", "b. Paris -   Correct  "]:
        q = parse_quiz_text(f"1. Capital?\n{line}")[0]
        assert q.options[0].text == "Paris"
        assert q.options[0].label == "b"
        assert q.correct_answer == "b"


def test_no_correct_answer_marked():
    q = parse_quiz_text("1. Pick one\na. x\nb. y")[0]
    assert q.correct_answer is None


def test_blocks_without_options_are_dropped():
    text = """
1. No options here
just some notes
=====
2. Real question
a. one - correct
b. two
=====
3. Options with bad letters
e. five
f. six
"""
    questions = parse_quiz_text(text)
    assert len(questions) == 1
    assert questions[0].number == 1
    assert questions[0].question == "Real question"


def test_invalid_blocks_are_skipped():
    text = """
only one line
=====
no question line here
a. orphan option
=====
1.
a. prompt missing
=====
Intro text before the question
2. Kept?
stray commentary
a. yes - correct

b. no
"""
    questions = parse_quiz_text(text)
    assert len(questions) == 1
    q = questions[0]
    assert q.question == "Kept?"
    assert [o.label for o in q.options] == ["a", "b"]


def test_options_before_question_line_are_ignored():
    q = parse_quiz_text("a. early\n1. Question?\nb. late - correct")[0]
    assert q.options == [QuizOption(label="b", text="late")]


def test_uppercase_labels_are_lowercased():
    q = parse_quiz_text("1. Q\nA. first\nD) fourth - correct")[0]
    assert [o.label for o in q.options] == ["a", "d"]
    assert q.correct_answer == "d"


def test_empty_and_garbage_input():
    assert parse_quiz_text("") == []
    assert parse_quiz_text("   \n\t  ") == []
    assert parse_quiz_text("===========") == []
    assert parse_quiz_text("hello world\nthis is not a quiz") == []


def test_windows_line_endings():
    q = parse_quiz_text("1. Q?\r\na. x\r\nb. y - correct\r\n")[0]
    assert q.question == "Q?"
    assert q.options[1].text == "y"
    assert q.correct_answer == "b"


def test_parsing_is_deterministic():
    text = SAMPLE + "\n2. Another\na. x - correct\nb. y\n"
    assert parse_quiz_text(text) == parse_quiz_text(text)


def test_last_marked_option_wins_with_warning():
    report = parse_quiz_report("1. Q\na. x - correct\nb. y\nc. z - correct")
    assert report.questions[0].correct_answer == "c"
    assert [o.text for o in report.questions[0].options] == ["x", "y", "z"]
    assert len(report.warnings) == 1
    assert "Question 1" in report.warnings[0]
    assert "'c'" in report.warnings[0]


def test_report_warns_about_unmarked_questions():
    report = parse_quiz_report(SAMPLE + "\n2. Unmarked\na. x\nb. y")
    assert len(report.questions) == 2
    assert report.warnings == ["Question 2 has no option marked correct."]


def test_report_for_empty_input():
    report = parse_quiz_report("")
    assert report.questions == []
    assert report.warnings == []


def test_leading_byte_order_mark_is_ignored():
    questions = parse_quiz_text("﻿1. Q?\na. x - correct\nb. y")
    assert len(questions) == 1
    assert questions[0].question == "Q?"
    assert questions[0].correct_answer == "a"
    assert parse_quiz_text("﻿") == []
