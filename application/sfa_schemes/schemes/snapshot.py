import copy
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from collections import Counter
from typing import Any, Dict, Iterable, List, Tuple
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PydanticValidationError

from sfa_schemes.core.constants import SchemeErrorCode
from sfa_schemes.dto.calculation import ConfigurationIssue
from sfa_schemes.dto.schemes import SchemeDefinition

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

# Logging
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.schemes.snapshot")

SCHEME_TZ = ZoneInfo(configs.SCHEME_TIMEZONE)


def scheme_now() -> datetime:
    return datetime.now(SCHEME_TZ)


def scheme_today() -> date:
    return scheme_now().date()


def _parse_issue(raw: Dict[str, Any], exc: PydanticValidationError) -> ConfigurationIssue:
    errors = [
        {
            "code": SchemeErrorCode.INVALID_DEFINITION,
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return ConfigurationIssue(scheme_id=str(raw.get("id", "")), errors=errors)


def _drop_duplicate_ids(schemes: List[SchemeDefinition]) -> Tuple[List[SchemeDefinition], List[ConfigurationIssue]]:
    """Every definition sharing an id is skipped, so the outcome cannot depend on row order"""
    counts = Counter(scheme.id for scheme in schemes)
    duplicates = sorted(scheme_id for scheme_id, count in counts.items() if count > 1)
    issues = [
        ConfigurationIssue(scheme_id=scheme_id, errors=[{
            "code": SchemeErrorCode.DUPLICATE_SCHEME_ID,
            "field": "id",
            "message": f"{counts[scheme_id]} definitions share id '{scheme_id}'",
        }])
        for scheme_id in duplicates
    ]
    for issue in issues:
        logger.warning(f"scheme_id_duplicated | scheme_id={issue.scheme_id}")
    return [scheme for scheme in schemes if counts[scheme.id] == 1], issues


@dataclass(frozen=True)
class SchemeSnapshot:
    """Scheme definitions pinned for one calculation.

    Definitions are deep-copied and parsed at capture time so later edits in
    the scheme master cannot reach a calculation that is already running.
    """

    snapshot_id: str
    as_of: date
    captured_at: datetime
    schemes: Tuple[SchemeDefinition, ...] = ()
    issues: Tuple[ConfigurationIssue, ...] = field(default_factory=tuple)

    @classmethod
    def capture(cls, definitions: Iterable[Any], as_of: date) -> "SchemeSnapshot":
        schemes = []
        issues = []
        for raw in definitions:
            if isinstance(raw, SchemeDefinition):
                schemes.append(raw)
                continue
            raw = copy.deepcopy(raw)
            try:
                schemes.append(SchemeDefinition.model_validate(raw))
            except PydanticValidationError as e:
                issue = _parse_issue(raw if isinstance(raw, dict) else {}, e)
                logger.warning(f"scheme_definition_unparseable | scheme_id={issue.scheme_id} errors={len(issue.errors)}")
                issues.append(issue)

        schemes, duplicate_issues = _drop_duplicate_ids(schemes)
        issues.extend(duplicate_issues)

        snapshot = cls(
            snapshot_id=str(uuid.uuid4()),
            as_of=as_of,
            captured_at=scheme_now(),
            schemes=tuple(schemes),
            issues=tuple(issues),
        )
        logger.info(f"scheme_snapshot_captured | snapshot_id={snapshot.snapshot_id} schemes={len(schemes)} issues={len(issues)} as_of={as_of}")
        return snapshot
