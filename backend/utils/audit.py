import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)


# Audit entries are best effort: the change they describe is already committed
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    try:
        entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Audit log write failed for %s/%s: %s", resource, action, e)


def client_ip(request):
    return request.client.host if request.client else None
