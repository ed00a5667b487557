"""Tests for guardian links and exercise attempts."""

from writequest.db import attempts_repository, links_repository


class TestLinks:
    """Tests for guardian links."""

    def test_link_and_list(self, make_user):
        """Linked students are listed by display name."""
        teacher = make_user("mrs-k", role="teacher")
        zoe = make_user("zoe")
        adam = make_user("adam")

        assert links_repository.link_student(teacher.id, zoe.id, "teacher") is True
        assert links_repository.link_student(teacher.id, adam.id, "teacher") is True

        students = links_repository.get_students_for_guardian(teacher.id, "teacher")
        assert [s.username for s in students] == ["adam", "zoe"]

    def test_link_twice(self, make_user):
        """Linking again reports that nothing was created."""
        parent = make_user("dad", role="parent")
        kid = make_user("kid")

        links_repository.link_student(parent.id, kid.id, "parent")

        assert links_repository.link_student(parent.id, kid.id, "parent") is False

    def test_relation_scoped(self, make_user):
        """A teacher link doesn't grant parent access."""
        guardian = make_user("both", role="teacher")
        kid = make_user("kid")
        links_repository.link_student(guardian.id, kid.id, "teacher")

        assert links_repository.is_linked(guardian.id, kid.id, "teacher") is True
        assert links_repository.is_linked(guardian.id, kid.id, "parent") is False
        assert links_repository.get_students_for_guardian(guardian.id, "parent") == []

    def test_unlink(self, make_user):
        """Unlinking removes the link once."""
        teacher = make_user("mrs-k", role="teacher")
        kid = make_user("kid")
        links_repository.link_student(teacher.id, kid.id, "teacher")

        assert links_repository.unlink_student(teacher.id, kid.id, "teacher") is True
        assert links_repository.unlink_student(teacher.id, kid.id, "teacher") is False
        assert links_repository.is_linked(teacher.id, kid.id, "teacher") is False


class TestAttempts:
    """Tests for exercise attempts."""

    def test_insert_and_list(self, make_user):
        """Attempts are stored with their answers, newest first."""
        user = make_user()
        first = attempts_repository.insert_attempt(user.id, "voice-1", False, {"selectedOption": 0})
        second = attempts_repository.insert_attempt(user.id, "voice-1", True, {"selectedOption": 2})

        attempts = attempts_repository.get_attempts_by_user(user.id)

        assert [a.id for a in attempts] == [second.id, first.id]
        assert attempts[0].is_correct is True
        assert attempts[1].answers == {"selectedOption": 0}
        assert attempts[0].to_dict()["exerciseId"] == "voice-1"
