import copy
import threading
from datetime import date
from typing import Dict, Iterable, List

from sqlalchemy import select

# Database connection
from sfa_schemes.connections.database import get_db_session
from sfa_schemes.models.schemes import Scheme

from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.schemes_repository")


class SchemesRepository:
    """Reads scheme definitions valid on a date from the scheme master table"""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def get_schemes(self, as_of: date) -> List[Dict]:
        try:
            with get_db_session(read_only=True, session_factory=self.session_factory) as db:
                query = (
                    select(Scheme)
                    .where(Scheme.start_date <= as_of, Scheme.end_date >= as_of)
                    .order_by(Scheme.start_date, Scheme.id)
                )
                rows = [row.to_definition() for row in db.execute(query).scalars().all()]
            logger.info(f"get_schemes_result | as_of={as_of} count={len(rows)}")
            return rows
        except Exception as e:
            logger.error(f"get_schemes_error | as_of={as_of} error={e}", exc_info=True)
            raise


class InMemorySchemeRepository:
    """Scheme source for in-process callers; hands out deep copies on every read"""

    def __init__(self, definitions: Iterable[Dict] = ()):
        self._definitions = [copy.deepcopy(d) for d in definitions]
        self._lock = threading.Lock()

    def get_schemes(self, as_of: date) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._definitions)

    def add(self, definition: Dict) -> None:
        with self._lock:
            self._definitions.append(copy.deepcopy(definition))

    def replace(self, definitions: Iterable[Dict]) -> None:
        with self._lock:
            self._definitions = [copy.deepcopy(d) for d in definitions]
