"""
Revenue and sales analytics for a teacher's courses
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from models import Course, Purchase
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("teacher_analytics")

RECENT_SALES_LIMIT = 5


def empty_analytics() -> Dict[str, Any]:
    return {
        "data": [],
        "totalRevenue": 0,
        "totalSales": 0,
        "monthlySales": 0,
        "courseCount": 0,
        "activeStudents": 0,
        "topPerformingCourse": None,
        "recentSales": [],
    }


def group_by_course(purchases: List[Purchase]) -> Dict[str, float]:
    """Sum course price per course title, in first-seen order"""
    grouped: Dict[str, float] = {}
    for purchase in purchases:
        title = purchase.course.title
        if purchase.course.price is None:
            raise ValueError(f"Course {purchase.course.id} has no price")
        grouped[title] = grouped.get(title, 0) + purchase.course.price
    return grouped


def get_analytics(db: Session, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Aggregate purchases of courses owned by the teacher.

    Any failure yields the fully zeroed shape from empty_analytics().
    """
    now = now or datetime.utcnow()
    try:
        purchases = (
            db.query(Purchase)
            .join(Purchase.course)
            .options(joinedload(Purchase.course))
            .filter(Course.user_id == user_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )
        course_count = db.query(Course).filter(Course.user_id == user_id).count()

        data = [{"name": title, "total": total} for title, total in group_by_course(purchases).items()]

        total_revenue = sum(entry["total"] for entry in data)
        total_sales = len(purchases)

        monthly_sales = sum(
            purchase.course.price
            for purchase in purchases
            if purchase.created_at.month == now.month and purchase.created_at.year == now.year
        )

        active_students = len({purchase.user_id for purchase in purchases})

        top_performing_course = None
        if data:
            # Stable sort: on equal totals the first-seen course wins
            best = sorted(data, key=lambda entry: entry["total"], reverse=True)[0]
            top_performing_course = {"title": best["name"], "revenue": best["total"]}

        recent_sales = [
            {"course": purchase.course.title, "amount": purchase.course.price or 0, "date": purchase.created_at}
            for purchase in purchases[:RECENT_SALES_LIMIT]
        ]

        return {
            "data": data,
            "totalRevenue": total_revenue,
            "totalSales": total_sales,
            "monthlySales": monthly_sales,
            "courseCount": course_count,
            "activeStudents": active_students,
            "topPerformingCourse": top_performing_course,
            "recentSales": recent_sales,
        }
    except Exception as e:
        logger.error("Error computing teacher analytics", category=LogCategory.ANALYTICS, exception=e, user_id=user_id)
        return empty_analytics()
