"""API route handlers."""

from .candidates import router as candidates_router
from .jobs import router as jobs_router
from .competence_files import router as competence_files_router
from .search import router as search_router
from .files import router as files_router
from .quotes import router as quotes_router
