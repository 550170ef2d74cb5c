"""
Application shell: the single owner of which screen is showing and of the
student list and settings loaded for it.
"""
import enum
import logging

from app_models import AcademySettings
from reminders import reminder_status
from store import StorageError

logger = logging.getLogger('academydesk.shell')


class ViewState(enum.Enum):
    SPLASH = 'SPLASH'
    LOGIN = 'LOGIN'
    DASHBOARD = 'DASHBOARD'
    STUDENTS = 'STUDENTS'
    REMINDERS = 'REMINDERS'
    RECEIPTS = 'RECEIPTS'
    SETTINGS = 'SETTINGS'


AUTHENTICATED_VIEWS = frozenset([
    ViewState.DASHBOARD,
    ViewState.STUDENTS,
    ViewState.REMINDERS,
    ViewState.RECEIPTS,
    ViewState.SETTINGS,
])


class StudentNotFound(LookupError):
    def __init__(self, student_id):
        super().__init__(f'Student {student_id} not found')
        self.student_id = student_id


class ReminderBlocked(Exception):
    def __init__(self, student, hours_left):
        super().__init__(f'Reminder for {student.name} blocked for {hours_left}h')
        self.student = student
        self.hours_left = hours_left


class Shell:
    def __init__(self, store):
        self.store = store
        self.view = ViewState.SPLASH
        self.students = []
        self.settings = AcademySettings()

    @property
    def authenticated(self):
        return self.view in AUTHENTICATED_VIEWS

    def _load(self):
        # Settings and students are always fetched together
        self.students = self.store.get_students()
        self.settings = self.store.get_settings()

    def boot(self):
        if self.store.is_authenticated():
            self._load()
            self.view = ViewState.DASHBOARD
        else:
            self.view = ViewState.LOGIN
        return self.view

    def login(self, password):
        if not self.store.login(password):
            return False
        self._load()
        self.view = ViewState.DASHBOARD
        return True

    def logout(self):
        self.store.logout()
        self.students = []
        self.settings = AcademySettings()
        self.view = ViewState.LOGIN

    def navigate(self, view):
        if not self.authenticated:
            self.view = ViewState.LOGIN
        elif view in AUTHENTICATED_VIEWS:
            self.view = view
        else:
            logger.warning('Ignoring navigation to %s', view)
        return self.view

    def refresh(self):
        self.students = self.store.get_students()
        return self.students

    def _mutate(self, write, *args):
        try:
            result = write(*args)
        except StorageError:
            # Show what is actually stored, not what we tried to store
            self.refresh()
            raise
        self.refresh()
        return result

    def find_student(self, student_id):
        for student in self.students:
            if student.id == student_id:
                return student
        raise StudentNotFound(student_id)

    def add_student(self, **fields):
        return self._mutate(lambda: self.store.add_student(**fields))

    def update_student(self, student):
        return self._mutate(self.store.update_student, student)

    def delete_student(self, student_id):
        return self._mutate(self.store.delete_student, student_id)

    def delete_class(self, standard):
        return self._mutate(self.store.delete_students_by_class, standard)

    def send_reminder(self, student_id, now):
        student = self.find_student(student_id)
        status = reminder_status(student.last_reminder_sent, now)
        if not status.allowed:
            raise ReminderBlocked(student, status.hours_left)
        stamped = self._mutate(self.store.record_reminder, student_id, now)
        if stamped is None:
            raise StudentNotFound(student_id)
        return stamped

    def save_settings(self, settings):
        self.store.update_settings(settings)
        self.settings = self.store.get_settings()
        return self.settings
