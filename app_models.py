# Database Models
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

DEFAULT_ACADEMY_NAME = 'My Academy'


class KeyValueRecord(db.Model):
    """One logical record of the academy store, held as JSON text under a key."""
    __tablename__ = 'kv_records'

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<KeyValueRecord {self.key}>'


def to_amount(value):
    """Coerce a stored or submitted fee amount to Decimal."""
    if isinstance(value, bool) or value is None:
        raise TypeError(f'Invalid amount: {value!r}')
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f'Invalid amount: {value!r}')
    if not amount.is_finite():
        raise ValueError(f'Invalid amount: {value!r}')
    return amount


def amount_to_json(amount):
    # Integral amounts are written as JSON integers, the rest as plain numbers
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


@dataclass
class Student:
    id: str
    name: str
    whatsapp: str
    standard: str
    total_fee: Decimal
    paid_fee: Decimal
    created_at: int
    last_reminder_sent: Optional[int] = None

    @property
    def due(self):
        """Outstanding amount; negative when the student has overpaid."""
        return self.total_fee - self.paid_fee

    def with_changes(self, **changes):
        return replace(self, **changes)

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'whatsapp': self.whatsapp,
            'standard': self.standard,
            'totalFee': amount_to_json(self.total_fee),
            'paidFee': amount_to_json(self.paid_fee),
            'createdAt': self.created_at,
        }
        if self.last_reminder_sent is not None:
            data['lastReminderSent'] = self.last_reminder_sent
        return data

    @classmethod
    def from_dict(cls, data):
        """Build a Student from its stored shape. Raises KeyError/TypeError/ValueError on bad input."""
        if not isinstance(data, dict):
            raise TypeError(f'Student record must be an object, got {type(data).__name__}')
        last_sent = data.get('lastReminderSent')
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            whatsapp=str(data['whatsapp']),
            standard=str(data['standard']),
            total_fee=to_amount(data['totalFee']),
            paid_fee=to_amount(data['paidFee']),
            created_at=int(data['createdAt']),
            last_reminder_sent=int(last_sent) if last_sent is not None else None,
        )


@dataclass
class AcademySettings:
    academy_name: str = field(default=DEFAULT_ACADEMY_NAME)

    def to_dict(self):
        return {'academyName': self.academy_name}

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise TypeError(f'Settings record must be an object, got {type(data).__name__}')
        return cls(academy_name=str(data['academyName']))
