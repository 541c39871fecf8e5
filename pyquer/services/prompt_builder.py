"""
Paper assembly and analysis prompt rendering.

Papers are numbered 1..N in the order given, and the same "Paper N"
labels are used in the instructions sent to the model.
"""
from dataclasses import dataclass
from typing import Sequence

from pyquer.models.paper import ParsedPaper
from pyquer.services.subject_classifier import has_technical_subject

NO_REPEATED_QUESTIONS = "No repeated questions found."
NO_DIFFERENCE_QUESTIONS = "No difference-based questions found."
NO_DIAGRAM_QUESTIONS = "No diagram-based questions found."

TECHNICAL_SUBJECT_NOTE = (
    "Note: These papers include mathematical or theoretical computer science content. "
    "Preserve formulas, equations, symbols and notation exactly as written, and treat "
    "questions that ask for the same derivation, proof or construction with different "
    "values as repeated questions."
)

PROMPT_TEMPLATE = """
You are an assistant that analyzes previous year question papers. From the papers below, provide a comprehensive analysis.
{technical_note}
Formatting rules:
- Refer to papers ONLY as "Paper 1", "Paper 2", etc., exactly as they are labelled in the input. Never add a year or any other suffix to a paper reference.
- If a table section below has no matching questions, write only its fallback sentence instead of an empty table.
- Every question belongs to at most one of sections 1, 2 and 3.

You must return the results in EXACTLY this format, including ALL sections:

1. Repeated Questions Analysis:
| Question | Repeated Count | Papers Appeared |
|----------|----------------|-----------------|
| What is software engineering? | 3 | Paper 1, Paper 2, Paper 3 |
If there are no repeated questions, write: "{no_repeated}"

2. Questions Asking for Differences:
| Question | Papers Appeared |
|----------|-----------------|
| Differentiate between A and B | Paper 2 |
If there are no such questions, write: "{no_difference}"

3. Questions Requiring Diagrams:
| Question | Papers Appeared |
|----------|-----------------|
| Draw and explain the architecture of... | Paper 1 |
If there are no such questions, write: "{no_diagram}"

4. Remaining Questions:
List every question not already included in sections 1-3, grouped by paper, always starting with Paper 1:
Paper 1:
a) [Question text]
b) [Question text]
Paper 2:
a) [Question text]

5. Study Recommendations:
1. Important Topics:
   - Topics that are repeated most often
2. Question Patterns:
   - Difference-based and diagram-based questions to practice
3. Preparation Strategy:
   - Order in which to study the topics above

6. Predictions:
List the questions or topics most likely to appear in the next paper, with a one-line reason for each.

INPUT PAPERS:
{papers_text}
"""


@dataclass(frozen=True)
class AssembledPrompt:
    papers_text: str
    prompt: str
    is_technical: bool


def build_papers_text(papers: Sequence[ParsedPaper]) -> str:
    """Label each paper "Paper N:" in input order, separated by blank lines"""
    return "\n\n".join(
        f"Paper {index}:\n{paper.text}" for index, paper in enumerate(papers, start=1)
    )


def build_prompt(papers_text: str, is_technical: bool) -> str:
    technical_note = f"\n{TECHNICAL_SUBJECT_NOTE}\n" if is_technical else ""
    return PROMPT_TEMPLATE.format(
        technical_note=technical_note,
        no_repeated=NO_REPEATED_QUESTIONS,
        no_difference=NO_DIFFERENCE_QUESTIONS,
        no_diagram=NO_DIAGRAM_QUESTIONS,
        papers_text=papers_text,
    )


def assemble(papers: Sequence[ParsedPaper]) -> AssembledPrompt:
    is_technical = has_technical_subject(papers)
    papers_text = build_papers_text(papers)
    return AssembledPrompt(
        papers_text=papers_text,
        prompt=build_prompt(papers_text, is_technical),
        is_technical=is_technical,
    )
