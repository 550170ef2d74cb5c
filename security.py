from functools import wraps

from flask import current_app, g, has_request_context, redirect, session, url_for

from app_models import db
from shell import Shell, ViewState
from store import AcademyStore, current_millis


def add_security_headers(response):
    """Add security headers to response"""
    # Reminder and receipt forms redirect to WhatsApp, so it is an allowed form target
    response.headers['Content-Security-Policy'] = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "img-src 'self' data:; "
        "form-action 'self' https://wa.me https://api.whatsapp.com"
    )

    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'same-origin'

    # Student data must never be cached; receipts and exports included
    if not (response.mimetype or '').startswith(('text/css', 'application/javascript', 'image/')):
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'

    return response


def get_store():
    if 'store' not in g:
        g.store = AcademyStore(
            db.session,
            current_app.config['ACADEMY_PASSWORD'],
            clock=current_app.config.get('CLOCK', current_millis),
            # Each browser carries its own login in the signed cookie session
            tokens=session if has_request_context() else None,
        )
    return g.store


def get_shell():
    """The shell for this request, booted from the store."""
    if 'shell' not in g:
        shell = Shell(get_store())
        shell.boot()
        g.shell = shell
    return g.shell


def view_required(view):
    """Gate a route behind the session and move the shell to ``view``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            shell = get_shell()
            if shell.navigate(view) is ViewState.LOGIN:
                return redirect(url_for('academy.login'))
            return f(shell, *args, **kwargs)
        return decorated_function
    return decorator


def init_security(app):
    """Initialize security features for the Flask app"""
    app.after_request(add_security_headers)
