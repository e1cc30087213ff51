"""
ImportRun: audit row per dump upload (what came in, what landed, what failed).
"""
from sqlalchemy import Column, Text, Integer, DateTime, JSON
from sqlalchemy.sql import func

from profile_directory.database import Base


class ImportRun(Base):
    __tablename__ = 'import_runs'

    id = Column(Text, primary_key=True)
    filename = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default='running')  # running/completed/failed
    records_found = Column(Integer, default=0)
    imported = Column(Integer, default=0)
    failed = Column(Integer, default=0)
    errors = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    finished_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'status': self.status,
            'records_found': self.records_found or 0,
            'imported': self.imported or 0,
            'failed': self.failed or 0,
            'errors': self.errors or [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
        }
