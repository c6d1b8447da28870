"""Owner-scoped task operations.

Every function takes the id of the authenticated user and only ever touches
that user's rows. A task owned by someone else is reported exactly like a
missing one.
"""

import enum
import logging
from typing import Mapping, Optional, Union

import pydantic
from sqlalchemy.orm import Session

import schemas
from errors import NotFoundError, ValidationError, describe_errors
from models import Task, utcnow

logger = logging.getLogger(__name__)


def _validate(model, fields):
    if isinstance(fields, model):
        return fields
    try:
        return model.model_validate(fields)
    except pydantic.ValidationError as exc:
        errors = exc.errors(include_url=False)
        raise ValidationError(describe_errors(errors), errors=errors)


def _column_value(value):
    if isinstance(value, enum.Enum):
        return value.value
    return value


def list_tasks(
    db: Session,
    user_id: int,
    status: Optional[schemas.TaskStatus] = None,
    priority: Optional[schemas.TaskPriority] = None,
):
    query = db.query(Task).filter(Task.user_id == user_id)
    if status is not None:
        query = query.filter(Task.status == _column_value(status))
    if priority is not None:
        query = query.filter(Task.priority == _column_value(priority))
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_task(db: Session, user_id: int, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def create_task(db: Session, user_id: int, fields: Union[schemas.TaskCreate, Mapping]) -> Task:
    data = _validate(schemas.TaskCreate, fields)

    task = Task(
        title=data.title,
        description=data.description,
        status=_column_value(data.status),
        priority=_column_value(data.priority),
        due_date=data.due_date,
        user_id=user_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info("Created task id=%s user=%s", task.id, user_id)
    return task


def update_task(db: Session, user_id: int, task_id: int, fields: Union[schemas.TaskUpdate, Mapping]) -> Task:
    data = _validate(schemas.TaskUpdate, fields)
    task = get_task(db, user_id, task_id)

    changes = data.model_dump(exclude_unset=True)
    for name, value in changes.items():
        setattr(task, name, _column_value(value))
    task.updated_at = utcnow()

    db.commit()
    db.refresh(task)

    logger.info("Updated task id=%s user=%s fields=%s", task.id, user_id, sorted(changes))
    return task


def delete_task(db: Session, user_id: int, task_id: int) -> None:
    task = get_task(db, user_id, task_id)
    db.delete(task)
    db.commit()
    logger.info("Deleted task id=%s user=%s", task_id, user_id)
