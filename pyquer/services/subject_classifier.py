from typing import Iterable, Optional

# Substring match, so short abbreviations ("cd", "dm", "toc") also hit
# unrelated subjects that happen to contain them.
TECHNICAL_SUBJECT_KEYWORDS = (
    "mathematics",
    "calculus",
    "algebra",
    "theory of computation",
    "toc",
    "discrete mathematics",
    "dm",
    "compiler design",
    "cd",
    "automata",
    "formal languages",
)


def is_technical_subject(subject: Optional[str]) -> bool:
    """True if the subject contains any technical keyword, case-insensitively"""
    if not subject:
        return False
    subject_lower = subject.lower()
    return any(keyword in subject_lower for keyword in TECHNICAL_SUBJECT_KEYWORDS)


def has_technical_subject(papers: Iterable) -> bool:
    """
    True if ANY paper in the batch has a technical subject.
    Accepts paper objects with a `subject` attribute, dicts, or plain strings.
    """
    for paper in papers:
        if isinstance(paper, str) or paper is None:
            subject = paper
        elif isinstance(paper, dict):
            subject = paper.get("subject")
        else:
            subject = getattr(paper, "subject", None)
        if is_technical_subject(subject):
            return True
    return False
