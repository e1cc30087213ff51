"""
Import pipeline contracts.

The pipeline runs  decode → extract → (per record) upsert + reconcile → provision
storage.  RawRecord is what the extractor hands to the per-record steps;
ImportResult is what the orchestrator hands back to the route.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


class _DateMissing:
    """Sentinel: the record had no <date> tag at all (not even an empty one)."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'DATE_MISSING'

    def __bool__(self):
        return False


DATE_MISSING = _DateMissing()


# ── Errors ───────────────────────────────────────────────────────────────────

class ImportInputError(Exception):
    """The uploaded file cannot be turned into account records."""


class DecodeError(ImportInputError):
    def __init__(self, message='Не удалось декодировать файл'):
        super().__init__(message)


class EmptyInputError(ImportInputError):
    def __init__(self, message='Файл пустой или не найден'):
        super().__init__(message)


class NoRecordsFoundError(ImportInputError):
    def __init__(self, message='Нет данных аккаунтов в файле'):
        super().__init__(message)


# ── Data ─────────────────────────────────────────────────────────────────────

@dataclass
class RawRecord:
    """One account as parsed from the dump: strings only, nothing resolved."""
    identificator: str
    title: Optional[str] = None
    dr: Optional[str] = None                 # age in years, as written
    city: Optional[str] = None
    tags: Optional[str] = None               # comma-separated
    nvideo: Optional[str] = None
    girl: Optional[str] = None
    boy: Optional[str] = None
    date: Any = DATE_MISSING                 # DATE_MISSING, '' or the raw token
    socials: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_date_tag(self) -> bool:
        return self.date is not DATE_MISSING


@dataclass
class ImportResult:
    """Outcome of one dump upload."""
    run_id: str
    filename: Optional[str] = None
    records_found: int = 0
    imported: int = 0
    failed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    fatal_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.fatal_error is None and self.failed == 0

    def add_error(self, identificator: str, message: str):
        self.failed += 1
        self.errors.append({'identificator': identificator, 'message': message})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'run_id': self.run_id,
            'records_found': self.records_found,
            'imported': self.imported,
            'failed': self.failed,
            'errors': self.errors[-50:],  # Keep the response small on bad dumps
        }
