"""Teacher and parent endpoints.

Both roles share one implementation: a guardian links student accounts by
username and can then read those students' progress and submissions.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from writequest.core.achievements import get_achievement_by_id
from writequest.db import links_repository, progress_repository, submissions_repository, users_repository
from writequest.db.links_repository import Relation
from writequest.db.users_repository import UserRecord
from writequest.web.deps import require_role
from writequest.web.schemas import (
    LinkStudentRequest,
    LinkStudentResponse,
    StudentDetailResponse,
    StudentListResponse,
    StudentSummaryResponse,
    SubmissionListResponse,
    SubmissionResponse,
)

logger = structlog.get_logger(__name__)


def _student_summary(student: UserRecord) -> StudentSummaryResponse:
    progress = progress_repository.get_progress_by_user_id(student.id)
    return StudentSummaryResponse.model_validate({
        **student.to_dict(),
        "progress": progress.to_dict() if progress is not None else None,
    })


def build_guardian_router(relation: Relation) -> APIRouter:
    """Create the router for one guardian role."""
    router = APIRouter(prefix=f"/api/{relation}", tags=[relation])
    current_guardian = require_role(relation)

    def _get_linked_student(student_id: int, guardian: UserRecord) -> UserRecord:
        student = users_repository.get_user_by_id(student_id)
        if student is None or student.role != "student":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student {student_id} not found",
            )
        if guardian.role != "admin" and not links_repository.is_linked(guardian.id, student.id, relation):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Student is not linked to your account",
            )
        return student

    @router.get("/students", response_model=StudentListResponse)
    async def list_students(guardian: UserRecord = Depends(current_guardian)) -> StudentListResponse:
        """Linked students with their progress."""
        students = links_repository.get_students_for_guardian(guardian.id, relation)
        return StudentListResponse(
            students=[_student_summary(s) for s in students],
            count=len(students),
        )

    @router.post("/link-student", response_model=LinkStudentResponse)
    async def link_student(
        data: LinkStudentRequest,
        guardian: UserRecord = Depends(current_guardian),
    ) -> LinkStudentResponse:
        """Link a student account by username."""
        student = users_repository.get_user_by_username(data.student_username)
        if student is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No student with username '{data.student_username}'",
            )
        if student.role != "student":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User '{data.student_username}' is not a student",
            )

        created = links_repository.link_student(guardian.id, student.id, relation)
        return LinkStudentResponse(student=_student_summary(student), already_linked=not created)

    @router.delete("/unlink-student/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def unlink_student(
        student_id: int,
        guardian: UserRecord = Depends(current_guardian),
    ) -> Response:
        """Remove a student link."""
        if not links_repository.unlink_student(guardian.id, student_id, relation):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student {student_id} is not linked to your account",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/student/{student_id}", response_model=StudentDetailResponse)
    async def get_student(
        student_id: int,
        guardian: UserRecord = Depends(current_guardian),
    ) -> StudentDetailResponse:
        """A linked student's profile, progress and earned achievements."""
        student = _get_linked_student(student_id, guardian)
        summary = _student_summary(student)
        earned = summary.progress.achievements if summary.progress is not None else []
        return StudentDetailResponse(
            **summary.model_dump(),
            achievements=[
                achievement.to_dict()
                for achievement in (get_achievement_by_id(a) for a in earned)
                if achievement is not None
            ],
        )

    @router.get("/student/{student_id}/submissions", response_model=SubmissionListResponse)
    async def get_student_submissions(
        student_id: int,
        guardian: UserRecord = Depends(current_guardian),
    ) -> SubmissionListResponse:
        """A linked student's submitted work (drafts excluded)."""
        student = _get_linked_student(student_id, guardian)
        submissions = submissions_repository.get_submissions_by_user(student.id, include_drafts=False)
        return SubmissionListResponse(
            submissions=[SubmissionResponse.model_validate(s.to_dict()) for s in submissions],
            count=len(submissions),
        )

    @router.get("/submissions/{submission_id}", response_model=SubmissionResponse)
    async def get_submission(
        submission_id: int,
        guardian: UserRecord = Depends(current_guardian),
    ) -> SubmissionResponse:
        """One submission by a linked student."""
        submission = submissions_repository.get_submission_by_id(submission_id)
        if submission is None or submission.status == "draft":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Submission {submission_id} not found",
            )
        _get_linked_student(submission.user_id, guardian)
        return SubmissionResponse.model_validate(submission.to_dict())

    return router


teacher_router = build_guardian_router("teacher")
parent_router = build_guardian_router("parent")
