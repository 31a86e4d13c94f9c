# import all models for Alembic
from csvbridge.db.models.user import User
from csvbridge.db.models.connection import RemoteConnection
from csvbridge.db.models.import_job import ImportJob
from csvbridge.db.models.import_log import ImportLog
from csvbridge.db.models.cleanup_audit import CleanupAuditLog
from csvbridge.db.models.mapping_template import MappingTemplate
