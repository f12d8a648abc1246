from typing import Dict, List

from mcqgen.schemas import MCQItem, QuestionResult, ScoreResult


def score_answers(items: List[MCQItem], answers: Dict[str, str]) -> ScoreResult:
    """Count items whose chosen option id is the correct one. Unknown ids count as wrong."""
    results: List[QuestionResult] = []
    for item in items:
        chosen = answers.get(item.id)
        option = next((o for o in item.options if o.id == chosen), None)
        results.append(QuestionResult(
            id=item.id,
            chosen=chosen,
            correct_option=item.correct_option.id,
            is_correct=bool(option and option.correct),
        ))
    return ScoreResult(
        correct=sum(1 for r in results if r.is_correct),
        total=len(items),
        results=results,
    )
