"""
CSV export of assessment results: one row per session, one score column per
question.
"""

import csv
import io
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from models import Assessment, AssessmentSession
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("results_export")

MISSING = "N/A"
BASE_COLUMNS = ["Student ID", "Submission Date", "Status", "Score", "Feedback"]


def format_score(score: Optional[float]) -> str:
    if score is None:
        return MISSING
    return str(int(score)) if float(score).is_integer() else str(score)


def format_date(value: datetime) -> str:
    """M/D/YYYY without zero padding"""
    return f"{value.month}/{value.day}/{value.year}"


def export_filename(title: str) -> str:
    return re.sub(r"\s+", "_", title) + "_results.csv"


def build_header(assessment: Assessment) -> List[str]:
    return BASE_COLUMNS + [f"Q{question.id[:4]} ({question.marks} marks)" for question in assessment.questions]


def build_row(assessment: Assessment, session: AssessmentSession) -> List[str]:
    responses_by_question = {response.question_id: response for response in session.responses}
    row = [
        session.user_id,
        format_date(session.created_at),
        session.status.value,
        format_score(session.score),
        session.feedback or MISSING,
    ]
    for question in assessment.questions:
        response = responses_by_question.get(question.id)
        row.append(format_score(response.score) if response else MISSING)
    return row


def export_results_csv(db: Session, assessment: Assessment) -> str:
    """Render every session of the assessment as CSV, newest session first"""
    sessions = (
        db.query(AssessmentSession)
        .options(selectinload(AssessmentSession.responses))
        .filter(AssessmentSession.assessment_id == assessment.id)
        .order_by(AssessmentSession.created_at.desc())
        .all()
    )

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(build_header(assessment))
    for session in sessions:
        writer.writerow(build_row(assessment, session))

    logger.info(
        "Results exported",
        category=LogCategory.ASSESSMENT,
        assessment_id=assessment.id,
        extra={"rows": len(sessions)},
    )
    return buffer.getvalue()
