from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from employee_manager.core.dependencies import get_current_user
from employee_manager.core.errors import ConflictError, NotFoundError, TransportError
from employee_manager.models.auth import UserInfo
from employee_manager.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from employee_manager.services.employee_store import employee_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[Employee])
async def list_employees(
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        return await employee_store.list_all()
    except TransportError as err:
        logger.exception("Failed to list employees")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load employees: {err}",
        ) from err


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee: EmployeeCreate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        employee_id = await employee_store.insert(employee)
    except ConflictError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except TransportError as err:
        logger.exception("Failed to create employee")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save employee: {err}",
        ) from err

    return {"id": employee_id}


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        employee = await employee_store.fetch_by_id(employee_id)
    except TransportError as err:
        logger.exception("Failed to get employee %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load employee: {err}",
        ) from err

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee '{employee_id}' not found",
        )

    return employee


@router.patch("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_employee(
    employee_id: str,
    changes: EmployeeUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        await employee_store.patch(employee_id, changes)
    except ConflictError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except NotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
    except TransportError as err:
        logger.exception("Failed to update employee %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save: {err}",
        ) from err

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        await employee_store.delete(employee_id)
    except TransportError as err:
        logger.exception("Failed to delete employee %s", employee_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete employee: {err}",
        ) from err

    return Response(status_code=status.HTTP_204_NO_CONTENT)
