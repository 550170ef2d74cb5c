"""
Persistence facade for the academy.

The academy settings and the student collection live in the ``kv_records`` table,
each under its own key. The session token is per client and lives in a separate
mapping, in practice the Flask cookie session. This module is the only place that
serializes any of them. Every write rewrites the whole record and commits before
returning, so a caller can re-read immediately.
"""
import hmac
import json
import logging
import time
import uuid
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from app_models import AcademySettings, KeyValueRecord, Student, to_amount

logger = logging.getLogger('academydesk.store')

STORAGE_KEYS = {
    'STUDENTS': 'amp_students',
    'SETTINGS': 'amp_settings',
    'SESSION': 'amp_session_token',
}


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""

    def __init__(self, key, message):
        super().__init__(f'{key}: {message}')
        self.key = key


def current_millis():
    return int(time.time() * 1000)


class AcademyStore:
    def __init__(self, session, password, clock=current_millis, tokens=None):
        self.session = session
        self.tokens = tokens if tokens is not None else {}
        self._password = password
        self._clock = clock

    def now(self):
        return self._clock()

    # --- Raw records ---

    def _read(self, key):
        try:
            record = self.session.get(KeyValueRecord, key)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Reading %s failed: %s', key, e)
            raise StorageError(key, 'storage unavailable') from e
        return record.value if record is not None else None

    def _write(self, key, value):
        try:
            record = self.session.get(KeyValueRecord, key)
            if record is None:
                self.session.add(KeyValueRecord(key=key, value=value))
            else:
                record.value = value
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Writing %s failed: %s', key, e)
            raise StorageError(key, 'data was not saved') from e

    def _load_json(self, key):
        raw = self._read(key)
        if raw is None:
            return None
        return json.loads(raw, parse_float=Decimal)

    # --- Auth ---

    def is_authenticated(self):
        return bool(self.tokens.get(STORAGE_KEYS['SESSION']))

    def login(self, password):
        if not hmac.compare_digest(str(password).encode('utf-8'), str(self._password).encode('utf-8')):
            logger.info('Login rejected')
            return False
        # Any non-empty value works; only presence of the token matters
        self.tokens[STORAGE_KEYS['SESSION']] = str(self.now())
        logger.info('Login accepted')
        return True

    def logout(self):
        self.tokens.pop(STORAGE_KEYS['SESSION'], None)

    # --- Settings ---

    def get_settings(self):
        try:
            data = self._load_json(STORAGE_KEYS['SETTINGS'])
            if data is None:
                return AcademySettings()
            return AcademySettings.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning('Stored settings are unreadable, using defaults: %s', e)
            return AcademySettings()

    def update_settings(self, settings):
        self._write(STORAGE_KEYS['SETTINGS'], json.dumps(settings.to_dict()))

    # --- Students ---

    def _decode_students(self):
        data = self._load_json(STORAGE_KEYS['STUDENTS'])
        if data is None:
            return []
        if not isinstance(data, list):
            raise TypeError(f'expected a list, got {type(data).__name__}')
        return [Student.from_dict(item) for item in data]

    def get_students(self):
        try:
            return self._decode_students()
        except (ValueError, KeyError, TypeError) as e:
            logger.warning('Stored students are unreadable, treating collection as empty: %s', e)
            return []

    def _students_for_write(self):
        # Never rewrite a collection we could not read; that would drop every record in it
        try:
            return self._decode_students()
        except (ValueError, KeyError, TypeError) as e:
            logger.error('Refusing to overwrite unreadable students: %s', e)
            raise StorageError(STORAGE_KEYS['STUDENTS'], 'stored students are unreadable') from e

    def _save_students(self, students):
        payload = json.dumps([s.to_dict() for s in students])
        self._write(STORAGE_KEYS['STUDENTS'], payload)

    def add_student(self, name, whatsapp, standard, total_fee, paid_fee, last_reminder_sent=None):
        students = self._students_for_write()
        existing_ids = {s.id for s in students}
        new_id = str(uuid.uuid4())
        while new_id in existing_ids:
            new_id = str(uuid.uuid4())
        student = Student(
            id=new_id,
            name=name,
            whatsapp=whatsapp,
            standard=str(standard),
            total_fee=to_amount(total_fee),
            paid_fee=to_amount(paid_fee),
            created_at=self.now(),
            last_reminder_sent=last_reminder_sent,
        )
        students.append(student)
        self._save_students(students)
        logger.info('Added student %s in standard %s', student.id, student.standard)
        return student

    def update_student(self, student):
        """Replace the record with the same id. Returns False if no such record exists."""
        students = self._students_for_write()
        for index, existing in enumerate(students):
            if existing.id == student.id:
                students[index] = student
                self._save_students(students)
                return True
        logger.info('Update skipped, student %s not found', student.id)
        return False

    def delete_student(self, student_id):
        students = self._students_for_write()
        remaining = [s for s in students if s.id != student_id]
        if len(remaining) == len(students):
            logger.info('Delete skipped, student %s not found', student_id)
            return False
        self._save_students(remaining)
        return True

    def delete_students_by_class(self, standard):
        """Remove every student whose standard equals ``standard`` exactly. Returns the count removed."""
        students = self._students_for_write()
        remaining = [s for s in students if s.standard != standard]
        removed = len(students) - len(remaining)
        if removed:
            self._save_students(remaining)
        logger.info('Removed %d students from standard %s', removed, standard)
        return removed

    def record_reminder(self, student_id, now=None):
        """Stamp the last reminder time on a student. Eligibility is the caller's check."""
        students = self._students_for_write()
        for index, existing in enumerate(students):
            if existing.id == student_id:
                stamped = existing.with_changes(
                    last_reminder_sent=self.now() if now is None else now
                )
                students[index] = stamped
                self._save_students(students)
                return stamped
        return None

