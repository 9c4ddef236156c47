"""
Dictionary round-tripping for SQLAlchemy models.

Used by the critical-data build (find_or_create_from_dict) and by the JSON
endpoints (to_dict).
"""

from datetime import date, datetime

from sqlalchemy import inspect

from helpdesk import db
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.core.data_insertion")

AUDIT_FIELDS = ('created_at', 'updated_at', 'created_by_id', 'updated_by_id')
HIDDEN_FIELDS = ('password_hash',)


class DataInsertionMixin:
    """Adds from_dict / to_dict / find_or_create_from_dict to a model."""

    @classmethod
    def from_dict(cls, data_dict, user_id=None, skip_fields=()):
        """
        Build an unsaved instance from the keys of data_dict that are columns.

        A 'password' key is hashed through set_password() when the model has it.
        user_id fills created_by_id/updated_by_id on models that carry them.
        """
        columns = {column.key for column in inspect(cls).columns}
        values = {
            key: value for key, value in data_dict.items()
            if key in columns and key not in skip_fields
            and not (key in ('created_at', 'updated_at') and value is None)
        }
        instance = cls(**values)

        if 'password' in data_dict and hasattr(instance, 'set_password'):
            instance.set_password(data_dict['password'])

        if user_id is not None:
            if hasattr(instance, 'created_by_id') and not instance.created_by_id:
                instance.created_by_id = user_id
            if hasattr(instance, 'updated_by_id'):
                instance.updated_by_id = user_id
        return instance

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        """
        Column values as a JSON-ready dict; dates become ISO strings.

        With include_relationships, many-to-one targets are nested one level
        deep (without their audit fields).
        """
        mapper = inspect(self.__class__)
        result = {}
        for column in mapper.columns:
            if column.key in HIDDEN_FIELDS:
                continue
            if not include_audit_fields and column.key in AUDIT_FIELDS:
                continue
            value = getattr(self, column.key)
            result[column.key] = value.isoformat() if isinstance(value, (datetime, date)) else value

        if include_relationships:
            for relationship in mapper.relationships:
                key = relationship.key
                if relationship.uselist or key in result or key in ('created_by', 'updated_by'):
                    continue
                related = getattr(self, key)
                if related is None:
                    result[key] = None
                elif hasattr(related, 'to_dict'):
                    result[key] = related.to_dict(include_audit_fields=False)
                else:
                    result[key] = str(related)
        return result

    @classmethod
    def create_from_dict(cls, data_dict, user_id=None, skip_fields=(), commit=True):
        instance = cls.from_dict(data_dict, user_id, skip_fields)
        db.session.add(instance)
        try:
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Could not insert {cls.__name__}: {e}")
            raise
        logger.info(f"Inserted {cls.__name__}: {instance}")
        return instance

    @classmethod
    def find_or_create_from_dict(cls, data_dict, user_id=None, skip_fields=(),
                                 lookup_fields=None, commit=True):
        """
        Return (instance, created).

        The lookup uses lookup_fields, or every unique column present in
        data_dict when none are given. With nothing to look up by, a new row is
        always inserted.
        """
        if lookup_fields is None:
            lookup_fields = [c.key for c in inspect(cls).columns if c.unique and c.key in data_dict]
        lookup = {field: data_dict[field] for field in lookup_fields if field in data_dict}

        if lookup:
            existing = cls.query.filter_by(**lookup).first()
            if existing is not None:
                logger.debug(f"{cls.__name__} already present: {lookup}")
                return existing, False
        return cls.create_from_dict(data_dict, user_id, skip_fields, commit), True
