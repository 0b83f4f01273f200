"""
Intervention scorer

Looks up catalogued interventions in Airtable, keeps those whose keywords
appear in the prompt (and whose location fits, when both sides name one),
and averages their cost, ease and effectiveness ratings.
"""

import logging
import math
import re
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from ..config import Config
from .http_client import ServiceError, ServiceErrorKind, build_url, request_json

logger = logging.getLogger(__name__)

# (result key, candidate Airtable field names)
SCORE_FIELDS = (
    ("cost", ("cost", "Cost", "Average cost")),
    ("ease", ("ease", "Ease")),
    ("effectiveness", ("effectiveness", "Effectiveness")),
)

_TOKEN_RE = re.compile(r'[^\W_]+')


@dataclass(frozen=True)
class InterventionMatch:
    """An Airtable record that matched the prompt."""
    id: str
    name: str
    cost: Optional[float] = None
    ease: Optional[float] = None
    effectiveness: Optional[float] = None


@dataclass
class ScoreResult:
    """Matches and their averaged ratings; averages is None when nothing matched."""
    matches: int = 0
    averages: Optional[Dict[str, Optional[float]]] = None
    items: List[InterventionMatch] = field(default_factory=list)

    @property
    def has_matches(self) -> bool:
        return self.matches > 0

    def summary(self) -> str:
        """One-line text for the status bar."""
        if not self.has_matches:
            return "No matching interventions found."

        def fmt(value):
            return "n/a" if value is None else f"{value:g}"

        averages = self.averages or {}
        return (f"{self.matches} matching intervention(s): cost {fmt(averages.get('cost'))}, "
                f"ease {fmt(averages.get('ease'))}, "
                f"effectiveness {fmt(averages.get('effectiveness'))}")


def normalize_tokens(text: Any) -> List[str]:
    """Lower-case letter/number runs of a string."""
    if not isinstance(text, str):
        text = '' if text is None else str(text)
    return _TOKEN_RE.findall(text.lower())


def extract_tokens(fields: Mapping[str, Any], names: Sequence[str]) -> Set[str]:
    """Tokens from the named fields; list-valued fields contribute every entry."""
    tokens: Set[str] = set()
    for name in names:
        value = fields.get(name)
        if not value:
            continue
        entries = value if isinstance(value, list) else [value]
        for entry in entries:
            tokens.update(normalize_tokens(entry))
    return tokens


def extract_score(fields: Mapping[str, Any], candidates: Sequence[str]) -> Optional[float]:
    """First finite numeric value among the candidate fields."""
    for name in candidates:
        value = fields.get(name)
        if value is None or isinstance(value, bool):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number):
            return number
    return None


def _average(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 2)


def score_records(
    records: Iterable[Mapping[str, Any]],
    prompt: str,
    location: str,
    keyword_fields: Sequence[str],
    location_fields: Sequence[str],
) -> ScoreResult:
    """
    Match records against a prompt and location and average their ratings.

    A record matches when one of its keyword tokens is in the prompt, and
    either side has no location tokens or they share one.
    """
    prompt_tokens = set(normalize_tokens(prompt))
    location_tokens = set(normalize_tokens(location))

    matches: List[InterventionMatch] = []
    for record in records:
        fields = record.get("fields") or {}
        keywords = extract_tokens(fields, keyword_fields)
        if not keywords or not keywords & prompt_tokens:
            continue

        record_locations = extract_tokens(fields, location_fields)
        if location_tokens and record_locations and not record_locations & location_tokens:
            continue

        scores = {key: extract_score(fields, names) for key, names in SCORE_FIELDS}
        matches.append(InterventionMatch(
            id=str(record.get("id", "")),
            name=fields.get("Name") or fields.get("Title") or "Untitled intervention",
            **scores,
        ))

    if not matches:
        return ScoreResult()

    averages = {key: _average(getattr(m, key) for m in matches) for key, _ in SCORE_FIELDS}
    return ScoreResult(matches=len(matches), averages=averages, items=matches)


class InterventionScorer:
    """Client for the intervention scoring collaborator."""

    PAGE_SIZE = 100

    def __init__(self, api_key: str, base_id: str, table_id: str,
                 keyword_fields: Sequence[str], location_fields: Sequence[str],
                 endpoint_template: str = Config.AIRTABLE_ENDPOINT_TEMPLATE):
        self._api_key = api_key
        self._base_id = base_id
        self._table_id = table_id
        self._keyword_fields = list(keyword_fields)
        self._location_fields = list(location_fields)
        self._endpoint_template = endpoint_template

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._base_id and self._table_id)

    def fetch_records(self) -> List[Dict[str, Any]]:
        """Fetch the first page of intervention records."""
        url = build_url(
            self._endpoint_template.format(
                base_id=self._base_id,
                table=urllib.parse.quote(self._table_id, safe=''),
            ),
            {"pageSize": self.PAGE_SIZE},
        )
        data = request_json(
            url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            error_message="Unable to fetch interventions from Airtable.",
        )
        return [r for r in data.get("records") or [] if isinstance(r, dict)]

    def score(self, prompt: str = '', location: str = '') -> ScoreResult:
        """
        Score a prompt against the catalogue.

        Raises:
            ServiceError: on missing credentials, empty input or upstream failure
        """
        if not self.is_configured:
            raise ServiceError(
                ServiceErrorKind.NOT_CONFIGURED,
                "Airtable credentials are missing. Please set AIRTABLE_API_KEY, "
                "AIRTABLE_BASE_ID, and AIRTABLE_TABLE_ID.",
            )
        if not (prompt or '').strip() and not (location or '').strip():
            raise ServiceError(ServiceErrorKind.BAD_REQUEST, "Prompt or location context is required.")

        result = score_records(self.fetch_records(), prompt, location,
                               self._keyword_fields, self._location_fields)
        logger.info(f"Intervention scoring matched {result.matches} record(s)")
        return result


__all__ = [
    'InterventionMatch',
    'ScoreResult',
    'normalize_tokens',
    'extract_score',
    'score_records',
    'InterventionScorer',
]
