# api/tasks.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import task_service
from auth_service import get_current_user
from database import get_db
from models import User
from schemas import Message, TaskCreate, TaskOut, TaskPriority, TaskStatus, TaskUpdate


# Every route here sits behind the bearer-token gate
router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Tasks of the current user, newest first."""
    return task_service.list_tasks(db, user.id, status=status, priority=priority)


@router.post("", response_model=TaskOut, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return task_service.create_task(db, user.id, task)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return task_service.get_task(db, user.id, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task: TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return task_service.update_task(db, user.id, task_id, task)


@router.delete("/{task_id}", response_model=Message)
def delete_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task_service.delete_task(db, user.id, task_id)
    return {"message": "Task removed"}
