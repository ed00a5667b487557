"""Tests for the submissions repository."""

import pytest

from writequest.db import submissions_repository


class TestSubmissions:
    """Tests for submission storage."""

    def test_insert_and_get(self, make_user):
        """A new submission starts submitted without feedback."""
        user = make_user()

        submission = submissions_repository.insert_submission(user.id, "park-1", "Trees", "Tall trees.")
        loaded = submissions_repository.get_submission_by_id(submission.id)

        assert loaded == submission
        assert loaded.status == "submitted"
        assert loaded.ai_feedback is None
        assert loaded.suggested_exercises is None

    def test_newest_first(self, make_user):
        """Listing returns the newest submission first."""
        user = make_user()
        first = submissions_repository.insert_submission(user.id, "park-1", "One", "a")
        second = submissions_repository.insert_submission(user.id, "cafe-1", "Two", "b")

        result = submissions_repository.get_submissions_by_user(user.id)

        assert [s.id for s in result] == [second.id, first.id]

    def test_exclude_drafts(self, make_user):
        """Drafts can be left out of listings."""
        user = make_user()
        submissions_repository.save_draft(user.id, "park-1", "Draft", "wip")
        kept = submissions_repository.insert_submission(user.id, "cafe-1", "Done", "done")

        assert len(submissions_repository.get_submissions_by_user(user.id)) == 2
        assert [s.id for s in submissions_repository.get_submissions_by_user(user.id, include_drafts=False)] == [kept.id]

    def test_only_own_submissions(self, make_user):
        """Listings are scoped to one user."""
        ana = make_user("ana")
        ben = make_user("ben")
        submissions_repository.insert_submission(ben.id, "park-1", "Ben's", "text")

        assert submissions_repository.get_submissions_by_user(ana.id) == []


class TestDrafts:
    """Tests for the draft lifecycle."""

    def test_save_draft_upserts(self, make_user):
        """Saving twice for one quest keeps one draft."""
        user = make_user()

        first = submissions_repository.save_draft(user.id, "park-1", "v1", "first")
        second = submissions_repository.save_draft(user.id, "park-1", "v2", "second")

        assert first.id == second.id
        assert second.status == "draft"
        assert second.content == "second"
        assert submissions_repository.get_draft(user.id, "park-1").title == "v2"

    def test_submit_promotes_draft(self, make_user):
        """Submitting reuses the draft row."""
        user = make_user()
        draft = submissions_repository.save_draft(user.id, "park-1", "v1", "first")

        submitted = submissions_repository.submit_writing(user.id, "park-1", "Final", "final text")

        assert submitted.id == draft.id
        assert submitted.status == "submitted"
        assert submitted.content == "final text"
        assert submissions_repository.get_draft(user.id, "park-1") is None

    def test_submit_without_draft(self, make_user):
        """Without a draft a new row is created."""
        user = make_user()

        submitted = submissions_repository.submit_writing(user.id, "park-1", "Final", "text")

        assert submitted.status == "submitted"


class TestRecordReview:
    """Tests for record_review."""

    def test_review_attached(self, make_user):
        """Feedback and suggestions are stored and the status is reviewed."""
        user = make_user()
        submission = submissions_repository.insert_submission(user.id, "park-1", "Trees", "text")

        reviewed = submissions_repository.record_review(
            submission.id,
            feedback="Nice imagery.",
            ai_feedback={"overallFeedback": "Nice imagery.", "voiceScore": 80},
            skills_assessed={"mechanics": 70, "sequencing": 65, "voice": 80},
            suggested_exercises=["sequencing-1"],
        )

        assert reviewed.status == "reviewed"
        assert reviewed.feedback == "Nice imagery."
        assert reviewed.ai_feedback["voiceScore"] == 80
        assert reviewed.skills_assessed["sequencing"] == 65
        assert reviewed.to_dict()["suggestedExercises"] == ["sequencing-1"]

    def test_missing_submission(self, db_path):
        """Reviewing a missing submission raises ValueError."""
        with pytest.raises(ValueError, match="Submission not found"):
            submissions_repository.record_review(99, "", {}, {}, [])
