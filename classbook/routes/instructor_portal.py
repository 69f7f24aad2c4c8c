# classbook/routes/instructor_portal.py
"""
Instructor portal.

Signed-in users who are not instructors are sent back to the home page
rather than shown an error.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from classbook.api.dependencies import (
    get_current_user,
    get_instructor_portal_service,
    require_instructor,
)
from classbook.models.user import User
from classbook.schemas.attendance import AttendanceRecordRequest, AttendanceRecordResponse
from classbook.schemas.instructor_portal import InstructorPortalSummary, PortalClassEntry
from classbook.services.instructor_portal_service import InstructorPortalService

router = APIRouter(prefix="/instructor-portal", tags=["instructor-portal"])


def _home_unless_instructor(user: User) -> Optional[RedirectResponse]:
    if user.is_instructor:
        return None
    return RedirectResponse("/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("", response_model=InstructorPortalSummary)
def portal_summary(
    current_user: User = Depends(get_current_user),
    service: InstructorPortalService = Depends(get_instructor_portal_service),
) -> Union[InstructorPortalSummary, RedirectResponse]:
    redirect = _home_unless_instructor(current_user)
    if redirect is not None:
        return redirect
    return service.get_summary(current_user.id)


@router.get("/classes", response_model=List[PortalClassEntry])
def portal_classes(
    current_user: User = Depends(get_current_user),
    service: InstructorPortalService = Depends(get_instructor_portal_service),
) -> Union[List[PortalClassEntry], RedirectResponse]:
    redirect = _home_unless_instructor(current_user)
    if redirect is not None:
        return redirect
    return service.list_classes(current_user.id)


@router.post("/classes/{class_id}/attendance", response_model=AttendanceRecordResponse)
def record_attendance(
    class_id: str,
    payload: AttendanceRecordRequest,
    current_user: User = Depends(require_instructor),
    service: InstructorPortalService = Depends(get_instructor_portal_service),
) -> AttendanceRecordResponse:
    return service.record_attendance(current_user.id, class_id, payload)
