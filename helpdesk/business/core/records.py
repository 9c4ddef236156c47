"""
Record lookup helpers shared by the managers
"""

from datetime import date

from helpdesk import db
from helpdesk.business.core.document_numbers import next_document_number
from helpdesk.business.core.errors import ConflictError, NotFoundError


def get_or_raise(model, record_id, label=None):
    """
    Load a row by primary key or raise NotFoundError.

    Args:
        model: SQLAlchemy model class
        record_id: Primary key (None is treated as missing)
        label: Name used in the error message (defaults to the class name)
    """
    record = db.session.get(model, int(record_id)) if record_id not in (None, '') else None
    if record is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return record


def get_optional(model, record_id, label=None):
    """Like get_or_raise, but an empty id returns None instead of raising"""
    if record_id in (None, ''):
        return None
    return get_or_raise(model, record_id, label)


def assign_document_number(record, doc_type, today=None):
    """
    Give a record its printable document number, keeping one it already has.

    The number is the highest issued for the month plus one (see
    next_document_number). Flushes but does not commit.
    """
    if record.document_number:
        return record.document_number

    today = today or date.today()
    model = type(record)
    prefix = f"{doc_type}-{today.strftime('%Y%m')}-"
    existing = [
        number for (number,) in db.session.query(model.document_number)
        .filter(model.document_number.like(f"{prefix}%")).all()
    ]
    record.document_number = next_document_number(doc_type, existing, today)
    db.session.flush()
    return record.document_number


def ensure_unreferenced(record_id, description, references):
    """
    Raise ConflictError when any of the referencing tables still points at
    the record.

    Args:
        record_id: Primary key of the row about to be deleted
        description: How the row is named in the message, e.g. "Asset LPT-2024-0001"
        references: (model, foreign key column name, plural label) tuples
    """
    for model, column, plural in references:
        count = model.query.filter(getattr(model, column) == record_id).count()
        if count:
            raise ConflictError(f"{description} is still used by {count} {plural}")
