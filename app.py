import io
import logging
import os
from datetime import datetime

from flask import (
    Blueprint, Flask, Response, abort, flash, jsonify, redirect, render_template,
    request, send_file, url_for,
)
from flask_wtf.csrf import CSRFProtect, generate_csrf

import aggregates
import exports
import receipts
import reminders
from app_models import AcademySettings, db
from config import get_config
from forms import LoginForm, SettingsForm, StudentForm
from health import health_bp
from security import get_shell, get_store, init_security, view_required
from shell import ReminderBlocked, StudentNotFound, ViewState
from store import StorageError

logger = logging.getLogger('academydesk.app')

csrf = CSRFProtect()

academy = Blueprint('academy', __name__)

NAV_ITEMS = [
    (ViewState.DASHBOARD, 'academy.dashboard', 'Home'),
    (ViewState.STUDENTS, 'academy.students', 'Students'),
    (ViewState.REMINDERS, 'academy.reminders_view', 'Remind'),
    (ViewState.RECEIPTS, 'academy.receipts_view', 'Receipts'),
    (ViewState.SETTINGS, 'academy.settings', 'Settings'),
]


def configure_logging(app):
    level = app.config.get('LOG_LEVEL', 'INFO')
    academy_logger = logging.getLogger('academydesk')
    academy_logger.setLevel(level)
    if not academy_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s in %(module)s: %(message)s'))
        academy_logger.addHandler(handler)
    return academy_logger


def create_app(config_object=None):
    app = Flask(
        __name__,
        template_folder=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates'),
        static_folder=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'static'),
    )
    config_object = config_object or get_config()
    app.config.from_object(config_object)
    config_object.init_app(app)

    configure_logging(app)
    db.init_app(app)
    csrf.init_app(app)
    init_security(app)

    app.register_blueprint(academy)
    app.register_blueprint(health_bp)
    app.register_error_handler(StorageError, handle_storage_error)

    app.add_template_filter(money_filter, 'money')
    app.context_processor(inject_globals)

    with app.app_context():
        db.create_all()

    logger.info('Academy Desk started (%s)', config_object.__name__)
    return app


def handle_storage_error(error):
    """Storage failures never reach the user as a crash; writes are reported as not saved."""
    logger.error('Storage failure on %s: %s', request.path, error)
    if request.method == 'POST':
        flash('Data was not saved. Please try again.', 'error')
        return redirect(request.referrer or url_for('academy.dashboard'))
    return render_template('error.html', message='Storage is unavailable right now.'), 503


# Custom Jinja2 filter for amounts with comma separators
def money_filter(value):
    try:
        return reminders.format_amount(value)
    except (AttributeError, TypeError):
        return value


def inject_globals():
    try:
        shell = get_shell()
    except StorageError:
        # Error pages still render when storage is down
        shell = None
    authenticated = shell is not None and shell.authenticated
    return {
        'datetime': datetime,
        'academy_name': shell.settings.academy_name if authenticated else '',
        'current_view': shell.view if shell is not None else ViewState.SPLASH,
        'authenticated': authenticated,
        'nav_items': NAV_ITEMS,
        'csrf_token': generate_csrf,
    }


# --- Splash & session ---

@academy.route('/')
def index():
    shell = get_shell()
    if shell.view is ViewState.DASHBOARD:
        return redirect(url_for('academy.dashboard'))
    return redirect(url_for('academy.login'))


@academy.route('/login', methods=['GET', 'POST'])
def login():
    # Keep passwords out of query strings and logs
    if request.method == 'GET' and request.args:
        return redirect(url_for('academy.login'))
    shell = get_shell()
    if shell.authenticated:
        return redirect(url_for('academy.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        if shell.login(form.password.data):
            flash('Login successful!', 'success')
            return redirect(url_for('academy.dashboard'))
        flash('Incorrect password. Please try again.', 'error')
    return render_template('login.html', form=form)


@academy.route('/logout', methods=['POST'])
def logout():
    get_shell().logout()
    flash('You have been logged out successfully!', 'info')
    return redirect(url_for('academy.login'))


# --- Dashboard ---

@academy.route('/dashboard')
@view_required(ViewState.DASHBOARD)
def dashboard(shell):
    summary = aggregates.summarize(shell.students)
    return render_template('dashboard.html', summary=summary)


@academy.route('/api/summary')
@view_required(ViewState.DASHBOARD)
def api_summary(shell):
    """Dashboard figures as JSON"""
    summary = aggregates.summarize(shell.students)
    totals = summary.totals
    return jsonify({
        'academyName': shell.settings.academy_name,
        'totalStudents': totals.total_students,
        'totalFeeCollected': str(totals.total_fee_collected),
        'totalPotentialFee': str(totals.total_potential_fee),
        'totalDueAmount': str(totals.total_due_amount),
        'collectionRate': summary.collection_rate,
        'classCounts': [{'standard': s, 'count': c} for s, c in summary.class_counts],
        'duesByClass': [{'standard': s, 'amount': str(a)} for s, a in summary.dues_by_class],
    })


# --- Students ---

def _filter_args():
    return request.args.get('search', '').strip(), request.args.get('standard', '').strip()


@academy.route('/students')
@view_required(ViewState.STUDENTS)
def students(shell):
    search, standard = _filter_args()
    filtered = exports.filter_students(shell.students, search, standard)
    return render_template(
        'students.html',
        students=filtered,
        search=search,
        standard=standard,
        standards=aggregates.sort_standards(s.standard for s in shell.students),
    )


@academy.route('/students/new', methods=['GET', 'POST'])
@view_required(ViewState.STUDENTS)
def add_student(shell):
    form = StudentForm()
    if form.validate_on_submit():
        student = shell.add_student(**form.student_fields())
        flash(f'Student "{student.name}" added successfully!', 'success')
        return redirect(url_for('academy.students'))
    return render_template('student_form.html', form=form, student=None)


@academy.route('/students/<student_id>/edit', methods=['GET', 'POST'])
@view_required(ViewState.STUDENTS)
def edit_student(shell, student_id):
    try:
        student = shell.find_student(student_id)
    except StudentNotFound:
        flash('Student not found!', 'error')
        return redirect(url_for('academy.students'))

    form = StudentForm(obj=student, extra_standards=[student.standard])
    if form.validate_on_submit():
        updated = student.with_changes(**form.student_fields())
        if shell.update_student(updated):
            flash('Student details updated successfully!', 'success')
        else:
            flash('Student not found!', 'error')
        return redirect(url_for('academy.students'))
    return render_template('student_form.html', form=form, student=student)


@academy.route('/students/<student_id>/delete', methods=['POST'])
@view_required(ViewState.STUDENTS)
def delete_student(shell, student_id):
    if shell.delete_student(student_id):
        flash('Student deleted.', 'success')
    else:
        flash('Student not found!', 'error')
    return redirect(url_for('academy.students'))


@academy.route('/students/class/<standard>/delete', methods=['POST'])
@view_required(ViewState.STUDENTS)
def delete_class(shell, standard):
    removed = shell.delete_class(standard)
    flash(f'Removed {removed} students from Standard {standard}.', 'success' if removed else 'info')
    return redirect(url_for('academy.students'))


@academy.route('/students/export.csv')
@view_required(ViewState.STUDENTS)
def export_students(shell):
    search, standard = _filter_args()
    filtered = exports.filter_students(shell.students, search, standard)
    return Response(
        exports.students_csv(filtered),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={exports.export_filename()}'},
    )


# --- Reminders ---

@academy.route('/reminders')
@view_required(ViewState.REMINDERS)
def reminders_view(shell):
    standard = request.args.get('standard', '').strip()
    pending = reminders.pending_students(shell.students)
    now = get_store().now()
    rows = [
        (s, reminders.reminder_status(s.last_reminder_sent, now))
        for s in reminders.pending_students(pending, standard)
    ]
    return render_template(
        'reminders.html',
        rows=rows,
        standard=standard,
        standards=aggregates.sort_standards(s.standard for s in pending),
    )


@academy.route('/reminders/<student_id>/send', methods=['POST'])
@view_required(ViewState.REMINDERS)
def send_reminder(shell, student_id):
    back = url_for('academy.reminders_view', standard=request.form.get('standard') or None)
    try:
        student = shell.find_student(student_id)
        if student.due <= 0:
            flash(f'{student.name} has no pending dues.', 'info')
            return redirect(back)
        student = shell.send_reminder(student_id, get_store().now())
    except StudentNotFound:
        flash('Student not found!', 'error')
        return redirect(back)
    except ReminderBlocked as e:
        flash(f'Reminder already sent to {e.student.name}. Wait {e.hours_left}h.', 'error')
        return redirect(back)

    message = reminders.reminder_message(student, shell.settings.academy_name)
    return redirect(reminders.whatsapp_link(student.whatsapp, message))


# --- Receipts ---

@academy.route('/receipts')
@view_required(ViewState.RECEIPTS)
def receipts_view(shell):
    standard = request.args.get('standard', '').strip()
    return render_template(
        'receipts.html',
        students=exports.filter_students(shell.students, standard=standard),
        standard=standard,
        standards=aggregates.sort_standards(s.standard for s in shell.students),
    )


def _receipt_student(shell, student_id):
    try:
        return shell.find_student(student_id)
    except StudentNotFound:
        abort(404)


@academy.route('/receipts/<student_id>.pdf')
@view_required(ViewState.RECEIPTS)
def receipt_pdf(shell, student_id):
    student = _receipt_student(shell, student_id)
    pdf = receipts.build_receipt(student, shell.settings.academy_name, get_store().now())
    return send_file(
        io.BytesIO(pdf),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=receipts.receipt_filename(student),
    )


@academy.route('/receipts/<student_id>/share')
@view_required(ViewState.RECEIPTS)
def share_receipt(shell, student_id):
    student = _receipt_student(shell, student_id)
    message = reminders.receipt_message(student, shell.settings.academy_name)
    return redirect(reminders.whatsapp_link(student.whatsapp, message))


# --- Settings ---

@academy.route('/settings', methods=['GET', 'POST'])
@view_required(ViewState.SETTINGS)
def settings(shell):
    form = SettingsForm(academy_name=shell.settings.academy_name)
    if form.validate_on_submit():
        shell.save_settings(AcademySettings(academy_name=form.academy_name.data.strip()))
        flash('Academy name updated!', 'success')
        return redirect(url_for('academy.settings'))
    return render_template('settings.html', form=form)
