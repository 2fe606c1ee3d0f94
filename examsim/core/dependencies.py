"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from examsim.db.session import get_db

STUDENT_ID_MAX_LENGTH = 64

DbSession = Annotated[Session, Depends(get_db)]


def get_student_id(
    x_student_id: Annotated[str | None, Header()] = None,
) -> str:
    """Learner identity, passed by the client in the X-Student-Id header."""
    if not x_student_id or not x_student_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Student-Id header missing",
        )
    student_id = x_student_id.strip()
    if len(student_id) > STUDENT_ID_MAX_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"X-Student-Id must be at most {STUDENT_ID_MAX_LENGTH} characters",
        )
    return student_id


StudentId = Annotated[str, Depends(get_student_id)]
