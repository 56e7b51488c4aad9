from datetime import datetime, timedelta
from unittest.mock import MagicMock

from models import UserProgress
from utils.progress import get_dashboard_courses, get_progress, upsert_chapter_progress

STUDENT_ID = "user_student_1"


class TestGetProgress:
    """Completion percentage over published chapters"""

    def test_course_without_published_chapters_is_zero(self, test_db, make_course):
        course = make_course(published=0, drafts=2)
        assert get_progress(test_db, STUDENT_ID, course.id) == 0

    def test_one_of_three_rounds_down(self, test_db, make_course, complete_chapters):
        course = make_course(published=3)
        complete_chapters(course.chapters[:1])
        assert get_progress(test_db, STUDENT_ID, course.id) == 33

    def test_two_of_three_rounds_up(self, test_db, make_course, complete_chapters):
        course = make_course(published=3)
        complete_chapters(course.chapters[:2])
        assert get_progress(test_db, STUDENT_ID, course.id) == 67

    def test_draft_chapters_are_ignored(self, test_db, make_course, complete_chapters):
        course = make_course(published=2, drafts=1)
        # chapters are ordered by position; the last one is the draft
        complete_chapters([course.chapters[0], course.chapters[2]])
        assert get_progress(test_db, STUDENT_ID, course.id) == 50

    def test_incomplete_rows_do_not_count(self, test_db, make_course):
        course = make_course(published=2)
        test_db.add(UserProgress(user_id=STUDENT_ID, chapter_id=course.chapters[0].id, is_completed=False))
        test_db.commit()
        assert get_progress(test_db, STUDENT_ID, course.id) == 0

    def test_other_students_progress_is_ignored(self, test_db, make_course, complete_chapters):
        course = make_course(published=2)
        complete_chapters(course.chapters, user_id="someone_else")
        assert get_progress(test_db, STUDENT_ID, course.id) == 0

    def test_failure_returns_zero(self):
        db = MagicMock()
        db.query.side_effect = RuntimeError("connection lost")
        assert get_progress(db, STUDENT_ID, "course-1") == 0


class TestDashboardCourses:
    """Purchased courses partitioned by completion"""

    def test_partition_by_completion(self, test_db, make_course, make_purchase, complete_chapters):
        finished = make_course(title="Finished", published=2, category="Programming")
        started = make_course(title="Started", published=4)
        make_purchase(finished, created_at=datetime.utcnow() - timedelta(days=2))
        make_purchase(started, created_at=datetime.utcnow() - timedelta(days=1))
        complete_chapters(finished.chapters)
        complete_chapters(started.chapters[:1])

        result = get_dashboard_courses(test_db, STUDENT_ID)

        assert [course["title"] for course in result["completedCourses"]] == ["Finished"]
        assert [course["title"] for course in result["coursesInProgress"]] == ["Started"]
        assert result["completedCourses"][0]["progress"] == 100
        assert result["completedCourses"][0]["category"]["name"] == "Programming"
        assert result["coursesInProgress"][0]["progress"] == 25

    def test_newest_purchase_first(self, test_db, make_course, make_purchase):
        older = make_course(title="Older")
        newer = make_course(title="Newer")
        make_purchase(older, created_at=datetime(2024, 1, 1))
        make_purchase(newer, created_at=datetime(2024, 3, 1))

        result = get_dashboard_courses(test_db, STUDENT_ID)

        assert [course["title"] for course in result["coursesInProgress"]] == ["Newer", "Older"]

    def test_only_published_chapters_listed(self, test_db, make_course, make_purchase):
        course = make_course(published=1, drafts=2)
        make_purchase(course)

        result = get_dashboard_courses(test_db, STUDENT_ID)

        assert len(result["coursesInProgress"][0]["chapters"]) == 1

    def test_no_purchases(self, test_db):
        assert get_dashboard_courses(test_db, STUDENT_ID) == {"completedCourses": [], "coursesInProgress": []}

    def test_failure_returns_empty_lists(self):
        db = MagicMock()
        db.query.side_effect = RuntimeError("connection lost")
        assert get_dashboard_courses(db, STUDENT_ID) == {"completedCourses": [], "coursesInProgress": []}


class TestUpsertChapterProgress:
    """Single progress row per (student, chapter)"""

    def test_second_update_reuses_row(self, test_db, make_course):
        course = make_course(published=1)
        chapter_id = course.chapters[0].id

        upsert_chapter_progress(test_db, STUDENT_ID, chapter_id, True)
        test_db.commit()
        upsert_chapter_progress(test_db, STUDENT_ID, chapter_id, False)
        test_db.commit()

        rows = test_db.query(UserProgress).filter(UserProgress.chapter_id == chapter_id).all()
        assert len(rows) == 1
        assert rows[0].is_completed is False
