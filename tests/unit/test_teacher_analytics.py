from datetime import datetime
from unittest.mock import MagicMock

import pytest

from utils.teacher_analytics import RECENT_SALES_LIMIT, empty_analytics, get_analytics, group_by_course

INSTRUCTOR_ID = "user_instructor_1"
OTHER_INSTRUCTOR_ID = "user_instructor_2"

NOW = datetime(2024, 6, 15, 12, 0)


class TestTeacherAnalytics:
    """Revenue and sales aggregation over the teacher's purchases"""

    def test_revenue_grouped_by_course(self, test_db, make_course, make_purchase):
        course_a = make_course(title="A", price=100.0)
        course_b = make_course(title="B", price=50.0)
        make_purchase(course_b, user_id="s1", created_at=datetime(2024, 6, 1))
        make_purchase(course_a, user_id="s1", created_at=datetime(2024, 6, 2))
        make_purchase(course_a, user_id="s2", created_at=datetime(2024, 6, 3))

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        # first-seen order over the newest-first purchase list
        assert result["data"] == [{"name": "A", "total": 200.0}, {"name": "B", "total": 50.0}]
        assert result["totalRevenue"] == 250
        assert result["totalSales"] == 3
        assert result["activeStudents"] == 2
        assert result["topPerformingCourse"] == {"title": "A", "revenue": 200.0}

    def test_monthly_sales_only_current_month(self, test_db, make_course, make_purchase):
        course = make_course(title="A", price=80.0)
        make_purchase(course, user_id="s1", created_at=datetime(2024, 6, 1))
        make_purchase(course, user_id="s2", created_at=datetime(2024, 5, 31))
        make_purchase(course, user_id="s3", created_at=datetime(2023, 6, 10))

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        assert result["monthlySales"] == 80
        assert result["totalRevenue"] == 240

    def test_recent_sales_limited_and_newest_first(self, test_db, make_course, make_purchase):
        course = make_course(title="A", price=10.0)
        for day in range(1, 8):
            make_purchase(course, user_id=f"s{day}", created_at=datetime(2024, 6, day))

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        assert len(result["recentSales"]) == RECENT_SALES_LIMIT
        assert result["recentSales"][0] == {"course": "A", "amount": 10.0, "date": datetime(2024, 6, 7)}
        assert result["recentSales"][-1]["date"] == datetime(2024, 6, 3)

    def test_tie_keeps_first_seen_course(self, test_db, make_course, make_purchase):
        course_x = make_course(title="X", price=30.0)
        course_y = make_course(title="Y", price=30.0)
        make_purchase(course_x, user_id="s1", created_at=datetime(2024, 6, 1))
        make_purchase(course_y, user_id="s1", created_at=datetime(2024, 6, 2))

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        assert result["topPerformingCourse"]["title"] == "Y"

    def test_other_teachers_courses_excluded(self, test_db, make_course, make_purchase):
        mine = make_course(title="Mine", price=20.0)
        theirs = make_course(title="Theirs", price=500.0, owner=OTHER_INSTRUCTOR_ID)
        make_purchase(mine, user_id="s1")
        make_purchase(theirs, user_id="s1")

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        assert result["totalRevenue"] == 20
        assert result["courseCount"] == 1

    def test_course_count_includes_unsold_courses(self, test_db, make_course):
        make_course(title="A")
        make_course(title="B")

        result = get_analytics(test_db, INSTRUCTOR_ID, now=NOW)

        assert result["courseCount"] == 2
        assert result["data"] == []
        assert result["topPerformingCourse"] is None

    def test_failure_returns_zeroed_shape(self):
        db = MagicMock()
        db.query.side_effect = RuntimeError("connection lost")

        assert get_analytics(db, INSTRUCTOR_ID, now=NOW) == empty_analytics()

    def test_missing_price_returns_zeroed_shape(self, test_db, make_course, make_purchase):
        course = make_course(title="Free", price=None)
        make_purchase(course, user_id="s1")

        assert get_analytics(test_db, INSTRUCTOR_ID, now=NOW) == empty_analytics()

    def test_group_by_course_rejects_unpriced_course(self, test_db, make_course, make_purchase):
        course = make_course(title="Free", price=None)
        purchase = make_purchase(course, user_id="s1")

        with pytest.raises(ValueError, match="has no price"):
            group_by_course([purchase])
