"""
Import orchestrator: runs one uploaded dump through the pipeline:

  DECODE → EXTRACT → for each record: CITY → ACCOUNT → TAGS → SOCIALS → COMMIT
                                      → PROVISION STORAGE (best effort)

Records are processed strictly one after another. Each record is its own
transaction: if any step fails the record is rolled back, reported in the
result, and the next record starts clean. Re-uploading the same dump is safe
and finishes whatever a previous attempt left undone.
"""
import logging
import uuid
from datetime import date
from typing import Optional

from profile_directory import config
from profile_directory.database import get_session
from profile_directory.extensions import get_storage
from profile_directory.imports.base import ImportInputError, ImportResult, RawRecord
from profile_directory.imports.decoder import decode
from profile_directory.imports.extractor import extract
from profile_directory.imports.reconciler import (
    resolve_city, attach_tags, attach_socials, social_type_ids,
)
from profile_directory.imports.upserter import upsert_account, MISSING_DATE_POLICIES
from profile_directory.services.db import start_import_run, finish_import_run

logger = logging.getLogger('imports.orchestrator')


def import_record(session, record: RawRecord, type_ids: dict,
                  policy: str, today: Optional[date] = None):
    """Persist one record and its associations. Caller owns commit/rollback."""
    city_id = resolve_city(session, record.city)
    account, created = upsert_account(session, record, city_id, policy=policy, today=today)
    attach_tags(session, account.id, record.tags)
    attach_socials(session, account.id, record.socials, type_ids=type_ids)
    return account, created


def provision_storage(storage, identificator: str, run_id: str = None):
    """Create the account's media folder. Failures are logged, never raised."""
    if storage is None:
        return
    try:
        storage.create_directory(identificator)
    except Exception as e:
        logger.warning("Could not provision storage for %s: %s", identificator, e,
                       extra={'run_id': run_id, 'identificator': identificator})


def _resolve_storage(storage, run_id):
    if storage is not None:
        return storage
    try:
        return get_storage()
    except Exception as e:
        logger.error("Storage backend unavailable, media folders will be skipped: %s", e,
                     extra={'run_id': run_id})
        return None


def import_dump(data: bytes, filename: str = None, storage=None,
                policy: str = None, today: Optional[date] = None) -> ImportResult:
    """
    Import a whole dump.

    Raises ImportInputError subclasses when the file yields no records; any
    other unexpected error is recorded on the audit row and re-raised.
    Per-record failures do not raise; they land in result.errors.
    """
    # Missing <date> handling is a deployment choice (IMPORT_MISSING_DATE_POLICY);
    # an unknown value is a configuration error, so fail before touching data.
    policy = (policy or config.IMPORT_MISSING_DATE_POLICY).lower()
    if policy not in MISSING_DATE_POLICIES:
        raise ValueError(f"IMPORT_MISSING_DATE_POLICY must be one of {MISSING_DATE_POLICIES}, got {policy!r}")

    run_id = str(uuid.uuid4())
    result = ImportResult(run_id=run_id, filename=filename)
    log_ctx = {'run_id': run_id}
    start_import_run(run_id, filename)
    logger.info("Import %s started (%s, %d bytes)", run_id, filename or 'unnamed', len(data), extra=log_ctx)

    try:
        records = extract(decode(data))
    except ImportInputError as e:
        logger.warning("Import %s rejected: %s", run_id, e, extra=log_ctx)
        result.fatal_error = str(e)
        finish_import_run(result)
        raise

    result.records_found = len(records)
    storage = _resolve_storage(storage, run_id)

    session = get_session()
    try:
        type_ids = social_type_ids(session)
        for record in records:
            ctx = {'run_id': run_id, 'identificator': record.identificator}
            try:
                import_record(session, record, type_ids, policy, today=today)
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error("Record %s failed, rolled back", record.identificator,
                             exc_info=True, extra=ctx)
                result.add_error(record.identificator, str(e))
                continue

            result.imported += 1
            provision_storage(storage, record.identificator, run_id)
    except Exception as e:
        result.fatal_error = str(e)
        finish_import_run(result)
        raise
    finally:
        session.close()

    finish_import_run(result)
    logger.info("Import %s finished: %d imported, %d failed of %d",
                run_id, result.imported, result.failed, result.records_found, extra=log_ctx)
    return result
