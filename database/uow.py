import contextlib
import logging
from typing import Iterator, Optional

from sqlalchemy.orm import sessionmaker

from database.database import get_session_factory
from database.repository import RecruitmentRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def recruitment_uow(session_factory: Optional[sessionmaker] = None) -> Iterator[RecruitmentRepository]:
    """Per-unit-of-work transaction scope.

    Yields a RecruitmentRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with recruitment_uow(factory) as repo:
            candidate = repo.candidates.get_by_id(candidate_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = (session_factory or get_session_factory())()
    try:
        repo = RecruitmentRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
