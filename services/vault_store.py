"""Per-user password vault.

Every query is filtered by the owning user id. An entry that exists but
belongs to someone else is reported exactly like a missing one.

Writes go through :func:`models.transaction`: the entry row, its strength,
any alerts raised by observers and the activity log record commit together.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from errors import ValidationError
from models import db, transaction
from models.activity_log import ActivityLog, CREATE_PASSWORD, UPDATE_PASSWORD, DELETE_PASSWORD
from models.password_entry import PasswordEntry
from patterns.observer import VaultSubject
from utils import strength

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'username', 'url', 'notes', 'category', 'encrypted_password')
REQUIRED_FIELDS = ('title', 'encrypted_password', 'category')


@dataclass
class RequestOrigin:
    ip_address: str = ''
    user_agent: str = ''


@dataclass
class PasswordStats:
    total: int
    weak: int
    strong: int

    @property
    def health(self) -> int:
        return strength.health_percentage(self.strong, self.total)

    def to_dict(self) -> dict:
        return {'total': self.total, 'weak': self.weak, 'strong': self.strong, 'health': self.health}


class VaultStore:
    def __init__(self, subject: Optional[VaultSubject] = None):
        self.subject = subject or VaultSubject()

    def list(self, user_id: int) -> List[PasswordEntry]:
        return PasswordEntry.query.filter_by(user_id=user_id).order_by(PasswordEntry.id).all()

    def get(self, entry_id: int, user_id: int) -> Optional[PasswordEntry]:
        return PasswordEntry.query.filter_by(id=entry_id, user_id=user_id).first()

    def create(self, user_id: int, title: str, encrypted_password: str,
               origin: Optional[RequestOrigin] = None, **extra) -> PasswordEntry:
        origin = origin or RequestOrigin()
        unknown = set(extra) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f'Unknown field: {sorted(unknown)[0]}')
        if not title:
            raise ValidationError('title is required')
        if not encrypted_password:
            raise ValidationError('encrypted_password is required')
        with transaction():
            entry = PasswordEntry(user_id=user_id, title=title,
                                  encrypted_password=encrypted_password,
                                  strength=strength.score(encrypted_password),
                                  **extra)
            db.session.add(entry)
            db.session.flush()
            self.subject.vault_changed(user_id, entry)
            ActivityLog.record(user_id, CREATE_PASSWORD, f'Created password for {entry.title}',
                               origin.ip_address, origin.user_agent)
        logger.info('entry %s created for user %s', entry.id, user_id)
        return entry

    def update(self, entry_id: int, user_id: int, fields: dict,
               origin: Optional[RequestOrigin] = None) -> Optional[PasswordEntry]:
        origin = origin or RequestOrigin()
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f'Unknown field: {sorted(unknown)[0]}')
        for name in REQUIRED_FIELDS:
            if name in fields and not fields[name]:
                raise ValidationError(f'{name} is required')

        with transaction():
            entry = self.get(entry_id, user_id)
            if entry is None:
                return None
            for k, v in fields.items():
                setattr(entry, k, v)
            if 'encrypted_password' in fields:
                entry.strength = strength.score(entry.encrypted_password)
            db.session.flush()
            self.subject.vault_changed(user_id, entry)
            ActivityLog.record(user_id, UPDATE_PASSWORD, f'Updated password for {entry.title}',
                               origin.ip_address, origin.user_agent)
        logger.info('entry %s updated for user %s', entry.id, user_id)
        return entry

    def delete(self, entry_id: int, user_id: int, origin: Optional[RequestOrigin] = None) -> bool:
        origin = origin or RequestOrigin()
        with transaction():
            entry = self.get(entry_id, user_id)
            if entry is None:
                return False
            db.session.delete(entry)
            ActivityLog.record(user_id, DELETE_PASSWORD, f'Deleted password with id {entry_id}',
                               origin.ip_address, origin.user_agent)
        logger.info('entry %s deleted for user %s', entry_id, user_id)
        return True

    def stats(self, user_id: int) -> PasswordStats:
        rows = db.session.query(PasswordEntry.strength).filter(PasswordEntry.user_id == user_id)
        counts = strength.tally(s for (s,) in rows)
        return PasswordStats(**counts)

    def activity(self, user_id: int, limit: int = 20) -> List[ActivityLog]:
        return ActivityLog.recent(user_id, limit)
