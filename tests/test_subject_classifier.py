import pytest

from pyquer.models.paper import ParsedPaper
from pyquer.services.subject_classifier import has_technical_subject, is_technical_subject


@pytest.mark.parametrize("subject", [
    "Compiler Design",
    "Mathematics",
    "Engineering Mathematics II",
    "Calculus",
    "Linear Algebra",
    "Theory of Computation",
    "TOC",
    "Discrete Mathematics",
    "DM",
    "CD Lab",
    "Automata",
    "Formal Languages and Automata",
])
def test_technical_subjects(subject):
    assert is_technical_subject(subject) is True


@pytest.mark.parametrize("subject", ["History", "English Literature", "Physics", "", None])
def test_non_technical_subjects(subject):
    assert is_technical_subject(subject) is False


def test_case_insensitive():
    assert is_technical_subject("MATH 101") == is_technical_subject("math 101")
    assert is_technical_subject("MATHEMATICS II") == is_technical_subject("mathematics ii")
    assert is_technical_subject("MATHEMATICS II") is True
    # Only the fixed keyword set counts; a bare "math" is not one of them
    assert is_technical_subject("MATH 101") is False


def test_abbreviation_false_positive_is_preserved():
    # "cd" matches inside unrelated words; accepted heuristic weakness
    assert is_technical_subject("ABCD Studies") is True


def test_any_paper_makes_batch_technical():
    papers = [
        ParsedPaper(text="", subject="History"),
        ParsedPaper(text="", subject="Compiler Design"),
    ]
    assert has_technical_subject(papers) is True


def test_batch_without_technical_subject():
    papers = [ParsedPaper(text="", subject="History"), ParsedPaper(text="", subject=None)]
    assert has_technical_subject(papers) is False


def test_batch_accepts_strings_and_dicts():
    assert has_technical_subject(["History", {"subject": "Algebra"}]) is True
    assert has_technical_subject([]) is False
