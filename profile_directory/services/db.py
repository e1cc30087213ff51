"""
Postgres persistence helpers: shared by the import pipeline and the routes.

find_or_create() / insert_ignore() are the only way the importer writes
lookup rows (cities, tags, socials) and join rows. Both lean on the unique
constraints declared on the models, so two writers racing for the same
natural key end up sharing one row instead of creating two.

Import-run audit writes are wrapped in try/except so an import never blocks
on bookkeeping errors.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from profile_directory.database import get_session
from profile_directory.models.import_run import ImportRun

logger = logging.getLogger('services.db')


# ── Insert-ignore / find-or-create ───────────────────────────────────────────

def _dialect_insert(session):
    """Return the dialect-specific insert() that supports ON CONFLICT, or None."""
    dialect = session.get_bind().dialect.name
    if dialect == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def insert_ignore(session, model, values: dict, conflict_columns) -> bool:
    """
    INSERT a row, doing nothing if it collides with a unique constraint.

    Returns True when a row was actually written. Runs inside the caller's
    transaction; nothing is committed here.
    """
    insert = _dialect_insert(session)
    if insert is not None:
        stmt = insert(model).values(**values).on_conflict_do_nothing(
            index_elements=list(conflict_columns),
        )
        result = session.execute(stmt)
        return (result.rowcount or 0) > 0

    # Dialects without ON CONFLICT: savepoint so a collision doesn't poison
    # the outer transaction.
    try:
        with session.begin_nested():
            session.add(model(**values))
            session.flush()
        return True
    except IntegrityError:
        return False


def find_or_create(session, model, defaults: dict = None, **lookup):
    """
    Look up a row by its natural key, creating it if absent.

    Returns (row, created). `lookup` must cover a unique constraint on
    `model`; `defaults` fills the remaining columns on insert only.
    """
    row = session.query(model).filter_by(**lookup).first()
    if row is not None:
        return row, False

    values = dict(lookup)
    values.update(defaults or {})
    created = insert_ignore(session, model, values, lookup.keys())

    # Re-select whether we inserted or lost the race to another writer
    row = session.query(model).filter_by(**lookup).one()
    return row, created


# ── Import run audit ─────────────────────────────────────────────────────────

def start_import_run(run_id: str, filename: str = None):
    """INSERT the audit row for an upload that is about to be processed."""
    session = get_session()
    try:
        session.add(ImportRun(
            id=run_id,
            filename=filename,
            status='running',
            errors=[],
        ))
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Failed to record import run %s", run_id, exc_info=True)
    finally:
        session.close()


def finish_import_run(result, status: str = None):
    """UPDATE the audit row with the batch outcome."""
    session = get_session()
    try:
        row = session.get(ImportRun, result.run_id)
        if row is None:
            row = ImportRun(id=result.run_id, filename=result.filename)
            session.add(row)
        row.status = status or ('completed' if not result.fatal_error else 'failed')
        row.records_found = result.records_found
        row.imported = result.imported
        row.failed = result.failed
        errors = list(result.errors)
        if result.fatal_error:
            errors.append({'identificator': None, 'message': result.fatal_error})
        row.errors = errors
        row.finished_at = datetime.now()
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Failed to persist import run %s", result.run_id, exc_info=True)
    finally:
        session.close()


def list_import_runs(limit: int = 20):
    """Most recent import runs, newest first."""
    session = get_session()
    try:
        rows = (
            session.query(ImportRun)
            .order_by(ImportRun.created_at.desc())
            .limit(limit)
            .all()
        )
        return [row.to_dict() for row in rows]
    finally:
        session.close()


def get_import_run(run_id: str):
    session = get_session()
    try:
        row = session.get(ImportRun, run_id)
        return row.to_dict() if row else None
    finally:
        session.close()
