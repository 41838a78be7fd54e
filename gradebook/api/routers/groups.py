"""
Router para grupos y estudiantes
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...database.repositories import GroupRepository, StudentRepository
from ...models.group import Group, Student
from ..deps import get_group_or_404, get_group_repository, get_student_repository, to_group
from ..exceptions import StudentNotFoundError
from ..schemas.common import APIResponse
from ..schemas.gradebook import EnrolmentRequest, GroupCreateRequest, StudentCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Groups"])


@router.post(
    "/groups",
    response_model=APIResponse[Group],
    status_code=status.HTTP_201_CREATED,
    summary="Crear grupo",
)
def create_group(
    request: GroupCreateRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
):
    group = group_repo.create(**request.model_dump())
    logger.info("Group created", extra={"group_id": group.id, "subject": group.subject})
    return APIResponse(message="Group created", data=to_group(group))


@router.get("/groups", response_model=APIResponse[List[Group]], summary="Listar grupos")
def list_groups(group_repo: GroupRepository = Depends(get_group_repository)):
    return APIResponse(data=[to_group(g) for g in group_repo.get_all()])


@router.get("/groups/{group_id}", response_model=APIResponse[Group], summary="Obtener grupo")
def get_group(group_id: str, group_repo: GroupRepository = Depends(get_group_repository)):
    return APIResponse(data=to_group(get_group_or_404(group_repo, group_id)))


@router.delete("/groups/{group_id}", response_model=APIResponse[None], summary="Eliminar grupo")
def delete_group(group_id: str, group_repo: GroupRepository = Depends(get_group_repository)):
    get_group_or_404(group_repo, group_id)
    group_repo.delete(group_id)
    return APIResponse(message="Group deleted")


@router.post(
    "/students",
    response_model=APIResponse[Student],
    status_code=status.HTTP_201_CREATED,
    summary="Alta de estudiante",
)
def create_student(
    request: StudentCreateRequest,
    student_repo: StudentRepository = Depends(get_student_repository),
):
    student = student_repo.create(**request.model_dump())
    return APIResponse(message="Student created", data=Student.model_validate(student))


@router.get("/students", response_model=APIResponse[List[Student]], summary="Listar estudiantes")
def list_students(student_repo: StudentRepository = Depends(get_student_repository)):
    return APIResponse(data=[Student.model_validate(s) for s in student_repo.get_all()])


@router.post(
    "/groups/{group_id}/students",
    response_model=APIResponse[Group],
    summary="Inscribir estudiante en grupo",
)
def enrol_student(
    group_id: str,
    request: EnrolmentRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    student_repo: StudentRepository = Depends(get_student_repository),
):
    get_group_or_404(group_repo, group_id)
    if student_repo.get_by_id(request.student_id) is None:
        raise StudentNotFoundError(request.student_id)

    group_repo.add_student(group_id, request.student_id)
    return APIResponse(message="Student enrolled", data=to_group(get_group_or_404(group_repo, group_id)))


@router.delete(
    "/groups/{group_id}/students/{student_id}",
    response_model=APIResponse[Group],
    summary="Dar de baja estudiante del grupo",
)
def remove_student(
    group_id: str,
    student_id: str,
    group_repo: GroupRepository = Depends(get_group_repository),
):
    get_group_or_404(group_repo, group_id)
    if not group_repo.remove_student(group_id, student_id):
        raise StudentNotFoundError(student_id)
    return APIResponse(message="Student removed", data=to_group(get_group_or_404(group_repo, group_id)))
