"""Parse pasted plain-text quizzes into structured questions.

Educators paste one block per question, blocks separated by a run of three
or more ``=`` characters::

    1. What is 2 + 2?
    a. 3
    b. 4 - correct
    c. 5
    =====
    2) Capital of France?
    a) Paris - correct
    b) Lyon

The numeral typed in front of a question is ignored and questions are
renumbered in the order they are found. A block that cannot yield a question
(no question line, empty prompt, no options) is skipped, so a partly broken
paste still produces every usable question. Parsing is pure: the same text
always produces the same questions.
"""

import re

from qemaker.schemas.question import ParseReport, Question, QuizOption

BLOCK_SEPARATOR = re.compile(r"={3,}")
QUESTION_LINE = re.compile(r"^[0-9]+[.)]\s*.+")
QUESTION_PREFIX = re.compile(r"^[0-9]+[.)]\s*")
OPTION_LINE = re.compile(r"^([a-dA-D])[.)]\s*(.+)")
# Trailing "correct" marker, with an optional hyphen before it.
CORRECT_MARKER = re.compile(r"\s*-?\s*correct\s*$", re.IGNORECASE)


def parse_quiz_text(raw_text: str) -> list[Question]:
    """Return the questions found in ``raw_text`` (possibly an empty list)."""
    return parse_quiz_report(raw_text).questions


def parse_quiz_report(raw_text: str) -> ParseReport:
    """Parse ``raw_text`` and collect authoring warnings alongside the questions.

    Warnings never change the parse result. They flag blocks that mark more
    than one option correct (the last marked option wins) and questions with
    no option marked correct.
    """
    if not raw_text:
        return ParseReport(questions=[])
    # Pastes from some editors start with a byte order mark.
    raw_text = raw_text.replace("\ufeff", "")
    if not raw_text.strip():
        return ParseReport(questions=[])

    questions: list[Question] = []
    warnings: list[str] = []
    for block in BLOCK_SEPARATOR.split(raw_text):
        block = block.strip()
        if not block:
            continue
        parsed = _parse_block(block)
        if parsed is None:
            continue
        prompt, options, marked = parsed
        number = len(questions) + 1
        correct_answer = marked[-1] if marked else None
        if len(marked) > 1:
            warnings.append(
                f"Question {number} marks {len(marked)} options as correct; "
                f"using '{correct_answer}'."
            )
        elif not marked:
            warnings.append(f"Question {number} has no option marked correct.")
        questions.append(
            Question(
                number=number,
                question=prompt,
                options=options,
                correct_answer=correct_answer,
            )
        )
    return ParseReport(questions=questions, warnings=warnings)


def _parse_block(block: str) -> tuple[str, list[QuizOption], list[str]] | None:
    lines = [line.strip() for line in block.split("\n")]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        return None

    question_index = next(
        (i for i, line in enumerate(lines) if QUESTION_LINE.match(line)), None
    )
    if question_index is None:
        return None

    prompt = QUESTION_PREFIX.sub("", lines[question_index], count=1).strip()
    if not prompt:
        return None

    options: list[QuizOption] = []
    marked: list[str] = []
    for line in lines[question_index + 1 :]:
        match = OPTION_LINE.match(line)
        if not match:
            continue
        label = match.group(1).lower()
        text = match.group(2).strip()
        if CORRECT_MARKER.search(text):
            marked.append(label)
            text = CORRECT_MARKER.sub("", text, count=1).strip()
        options.append(QuizOption(label=label, text=text))

    if not options:
        return None
    return prompt, options, marked
