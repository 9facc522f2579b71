from flask import render_template, url_for, flash, redirect, request, jsonify
from campussync import app
from campussync.auth import current_principal, end_session, login as authenticate, start_session
from campussync.errors import AuthFailure, RequestFailed, StorageUnavailable, UnknownAction
from campussync.principal import Role
from campussync.repositories import CourseRepository, FacultyRepository, StudentRepository
from campussync.router import LoginRedirect, Redirect, ViewResult, route
import logging
logger = logging.getLogger(__name__)

PANEL_ENDPOINTS = {
    Role.ADMIN: 'admin_panel',
    Role.STUDENT: 'student_panel',
    Role.FACULTY: 'faculty_panel',
}

def _safe_next(next_url):
    # Only same-site relative paths; anything else falls back to the panel.
    if next_url and next_url.startswith('/') and not next_url.startswith('//'):
        return next_url
    return None

def _respond(outcome, endpoint, principal):
    if isinstance(outcome, LoginRedirect):
        flash('Please log in to access this page.', 'warning')
        return redirect(url_for('login', next=request.full_path))
    if isinstance(outcome, Redirect):
        if outcome.message:
            flash(outcome.message, outcome.category)
        return redirect(url_for(endpoint, action=outcome.action))
    if isinstance(outcome, ViewResult):
        return render_template(outcome.template, principal=principal, **outcome.context)
    raise TypeError(f"Unexpected routing outcome: {outcome!r}")

def _dispatch(role, endpoint):
    principal = current_principal()
    params = request.form if request.method == 'POST' else request.args
    action = params.get('action') or request.args.get('action')
    outcome = route(principal, role, action, request.method, params)
    return _respond(outcome, endpoint, principal)

@app.route("/")
def index():
    principal = current_principal()
    if principal is None:
        return redirect(url_for('login'))
    return redirect(url_for(PANEL_ENDPOINTS[principal.role]))

@app.route("/login", methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        portal = request.form.get('portal', Role.STUDENT.value)
        username = request.form.get('username', '')
        password = request.form.get('password', '')
        try:
            principal = authenticate(portal, username, password)
        except AuthFailure:
            flash('Invalid credentials.', 'danger')
            return render_template('login.html', title='Login', portal=portal), 401
        start_session(principal)
        flash('Logged in successfully.', 'success')
        next_url = _safe_next(request.args.get('next'))
        return redirect(next_url or url_for(PANEL_ENDPOINTS[principal.role]))
    return render_template('login.html', title='Login', portal=request.args.get('portal', Role.STUDENT.value))

@app.route("/logout")
def logout():
    end_session()
    flash('Logged out.', 'info')
    return redirect(url_for('login'))

@app.route("/adminPanel", methods=['GET', 'POST'])
def admin_panel():
    return _dispatch(Role.ADMIN, 'admin_panel')

@app.route("/studentPanel", methods=['GET', 'POST'])
def student_panel():
    return _dispatch(Role.STUDENT, 'student_panel')

@app.route("/facultyPanel", methods=['GET', 'POST'])
def faculty_panel():
    return _dispatch(Role.FACULTY, 'faculty_panel')

@app.route('/health')
def health():
    try:
        student_count = StudentRepository().count()
        faculty_count = FacultyRepository().count()
        course_count = CourseRepository().count()
        return jsonify({"status": "ok", "students": student_count, "faculty": faculty_count, "courses": course_count}), 200
    except StorageUnavailable as e:
        logger.exception("Health check failed")
        return jsonify({"status": "error", "message": str(e)}), 500

@app.errorhandler(UnknownAction)
def handle_unknown_action(error):
    return render_template('error.html', title='Bad Request', message=str(error)), 400

@app.errorhandler(RequestFailed)
@app.errorhandler(StorageUnavailable)
def handle_request_failed(error):
    logger.error(f"Request failed: {error}")
    return render_template('error.html', title='Error', message='The request could not be completed. Please try again later.'), 500

@app.errorhandler(404)
def handle_404(error):
    return render_template('error.html', title='Not Found', message='The page you requested does not exist.'), 404
