"""Role-gated dispatch of portal actions.

``route()`` maps ``(role, action, method)`` to exactly one handler from a
static table and returns one of three outcomes:

* ``ViewResult`` - a template name plus a read-only mapping of bindings
* ``Redirect`` - post/redirect/get target after a mutation, with a message
* ``LoginRedirect`` - the request carried no principal or the wrong role

Unknown GET actions fall back to the role's dashboard. Unknown POST actions
raise ``UnknownAction``. Storage failures abort the request with
``RequestFailed``; a view is never returned with half of its bindings.
"""
import logging
import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from flask import current_app

from campussync.auth import hash_password
from campussync.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    ConstraintViolation,
    MalformedInput,
    RequestFailed,
    StorageUnavailable,
    UnknownAction,
)
from campussync.models import Course, Faculty, Notice, Student, Subject
from campussync.principal import Role
from campussync.repositories import (
    AttendanceRepository,
    CourseRepository,
    FacultyRepository,
    MarkRepository,
    NoticeRepository,
    StudentRepository,
    SubjectRepository,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Largest value a SQLite INTEGER column can hold.
_MAX_INTEGER = 2 ** 63 - 1


class ViewResult(NamedTuple):
    template: str
    context: Mapping


class Redirect(NamedTuple):
    action: str
    message: Optional[str] = None
    category: str = 'success'


class LoginRedirect(NamedTuple):
    reason: str


class AdminView(Enum):
    DASHBOARD = 'dashboard'
    NOTICES = 'notices'
    STUDENTS = 'students'
    FACULTY = 'faculty'
    COURSES = 'courses'
    SUBJECTS = 'subjects'
    ADD_SUBJECT = 'addSubject'
    ADD_COURSE = 'addCourse'
    ADD_NOTICE = 'addNotice'


class AdminCommand(Enum):
    ADD_STUDENT = 'addStudent'
    ADD_FACULTY = 'addFaculty'
    ADD_COURSE = 'addCourse'
    ADD_SUBJECT = 'addSubject'
    SAVE_NOTICE = 'saveNotice'


class StudentView(Enum):
    DASHBOARD = 'dashboard'
    ATTENDANCE = 'attendance'
    MARKS = 'marks'
    NOTICES = 'notices'


class FacultyView(Enum):
    DASHBOARD = 'dashboard'
    SUBJECTS = 'subjects'
    NOTICES = 'notices'


_students = StudentRepository()
_faculty = FacultyRepository()
_courses = CourseRepository()
_subjects = SubjectRepository()
_notices = NoticeRepository()
_attendance = AttendanceRepository()
_marks = MarkRepository()


def _view(template, **bindings):
    return ViewResult(template, MappingProxyType(bindings))


# --- Form validation ---

def _required(params, field):
    value = (params.get(field) or '').strip()
    if not value:
        raise MalformedInput(f"{field} is required.")
    return value


def _positive_int(params, field):
    value = _required(params, field)
    try:
        number = int(value)
    except ValueError:
        raise MalformedInput(f"{field} must be a whole number.") from None
    if number < 1:
        raise MalformedInput(f"{field} must be greater than zero.")
    if number > _MAX_INTEGER:
        raise MalformedInput(f"{field} is too large.")
    return number


def _email(params):
    email = _required(params, 'email')
    if not _EMAIL_RE.match(email):
        raise MalformedInput('Invalid email format.')
    return email


def _password(params):
    password = params.get('password') or ''
    min_len = int(current_app.config.get('PASSWORD_MIN_LENGTH', 8))
    if len(password) < min_len:
        raise MalformedInput(f"Password must be at least {min_len} characters.")
    return password


def _apply(label, form_action, listing_action, build, insert):
    """Validate, insert, and report the result as a redirect."""
    try:
        record = build()
    except MalformedInput as e:
        logger.info(f"Rejected {label} form: {e}")
        return Redirect(form_action.value, str(e), 'danger')
    try:
        insert(record)
    except ConstraintViolation as e:
        return Redirect(listing_action.value, f"Could not add {label}: {e}", 'danger')
    return Redirect(listing_action.value, f"{label.capitalize()} added.", 'success')


# --- Admin handlers ---

def admin_dashboard(principal, params):
    return _view('admin/dashboard.html')


def admin_notices(principal, params):
    return _view('admin/notices.html', noticeList=_notices.list_all())


def admin_students(principal, params):
    return _view('admin/manage_students.html', students=_students.list_all())


def admin_faculty(principal, params):
    return _view('admin/manage_faculty.html', facultyData=_faculty.list_all())


def admin_courses(principal, params):
    return _view('admin/manage_courses.html', courseData=_courses.list_all())


def admin_subjects(principal, params):
    subject_data = _subjects.list_joined()
    courses = _courses.list_all()
    faculty = _faculty.list_all()
    return _view('admin/manage_subjects.html', subjectData=subject_data, courses=courses, faculty=faculty)


def admin_add_subject_form(principal, params):
    courses = _courses.list_all()
    faculty_list = _faculty.list_all()
    return _view('admin/add_subject.html', courses=courses, facultyList=faculty_list)


def admin_add_course_form(principal, params):
    return _view('admin/add_course.html')


def admin_add_notice_form(principal, params):
    return _view('admin/add_notice.html')


def admin_add_student(principal, params):
    def build():
        name = _required(params, 'name')
        email = _email(params)
        password = _password(params)
        course = _required(params, 'course')
        semester = _positive_int(params, 'semester')
        return Student(name=name, email=email, password_hash=hash_password(password),
                       course=course, semester=semester)
    return _apply('student', AdminView.STUDENTS, AdminView.STUDENTS, build, _students.insert)


def admin_add_faculty(principal, params):
    def build():
        name = _required(params, 'name')
        email = _email(params)
        password = _password(params)
        department = _required(params, 'department')
        return Faculty(name=name, email=email, password_hash=hash_password(password),
                       department=department)
    return _apply('faculty', AdminView.FACULTY, AdminView.FACULTY, build, _faculty.insert)


def admin_add_course(principal, params):
    def build():
        return Course(name=_required(params, 'course_name'))
    return _apply('course', AdminView.ADD_COURSE, AdminView.COURSES, build, _courses.insert)


def admin_add_subject(principal, params):
    def build():
        name = _required(params, 'subject_name')
        course_id = _positive_int(params, 'course_id')
        faculty_id = _positive_int(params, 'faculty_id')
        return Subject(name=name, course_id=course_id, faculty_id=faculty_id)
    return _apply('subject', AdminView.ADD_SUBJECT, AdminView.SUBJECTS, build, _subjects.insert)


def admin_save_notice(principal, params):
    def build():
        return Notice(title=_required(params, 'title'), message=_required(params, 'message'))
    return _apply('notice', AdminView.ADD_NOTICE, AdminView.NOTICES, build, _notices.insert)


# --- Student handlers ---

def student_dashboard(principal, params):
    return _view('student/dashboard.html')


def student_attendance(principal, params):
    return _view('student/attendance.html', attendanceList=_attendance.find_for_principal(principal))


def student_marks(principal, params):
    return _view('student/marks.html', marksList=_marks.find_for_principal(principal))


def student_notices(principal, params):
    return _view('student/notices.html', noticeList=_notices.list_all())


# --- Faculty handlers ---

def faculty_dashboard(principal, params):
    return _view('faculty/dashboard.html')


def faculty_subjects(principal, params):
    return _view('faculty/subjects.html', subjectList=_subjects.find_for_faculty(principal))


def faculty_notices(principal, params):
    return _view('faculty/notices.html', noticeList=_notices.list_all())


# --- Routing tables ---

class RoutingTable(NamedTuple):
    views: type
    commands: Optional[type]
    default: Enum
    handlers: Mapping


ROUTING_TABLES = MappingProxyType({
    Role.ADMIN: RoutingTable(
        views=AdminView,
        commands=AdminCommand,
        default=AdminView.DASHBOARD,
        handlers=MappingProxyType({
            AdminView.DASHBOARD: admin_dashboard,
            AdminView.NOTICES: admin_notices,
            AdminView.STUDENTS: admin_students,
            AdminView.FACULTY: admin_faculty,
            AdminView.COURSES: admin_courses,
            AdminView.SUBJECTS: admin_subjects,
            AdminView.ADD_SUBJECT: admin_add_subject_form,
            AdminView.ADD_COURSE: admin_add_course_form,
            AdminView.ADD_NOTICE: admin_add_notice_form,
            AdminCommand.ADD_STUDENT: admin_add_student,
            AdminCommand.ADD_FACULTY: admin_add_faculty,
            AdminCommand.ADD_COURSE: admin_add_course,
            AdminCommand.ADD_SUBJECT: admin_add_subject,
            AdminCommand.SAVE_NOTICE: admin_save_notice,
        }),
    ),
    Role.STUDENT: RoutingTable(
        views=StudentView,
        commands=None,
        default=StudentView.DASHBOARD,
        handlers=MappingProxyType({
            StudentView.DASHBOARD: student_dashboard,
            StudentView.ATTENDANCE: student_attendance,
            StudentView.MARKS: student_marks,
            StudentView.NOTICES: student_notices,
        }),
    ),
    Role.FACULTY: RoutingTable(
        views=FacultyView,
        commands=None,
        default=FacultyView.DASHBOARD,
        handlers=MappingProxyType({
            FacultyView.DASHBOARD: faculty_dashboard,
            FacultyView.SUBJECTS: faculty_subjects,
            FacultyView.NOTICES: faculty_notices,
        }),
    ),
})


def check_routing_tables(tables):
    """Every role has a table and every action of a table has exactly one handler."""
    missing_roles = set(Role) - set(tables)
    if missing_roles:
        raise RuntimeError(f"No routing table for roles: {sorted(r.value for r in missing_roles)}")
    for role, table in tables.items():
        expected = set(table.views) | set(table.commands or ())
        missing = expected - set(table.handlers)
        extra = set(table.handlers) - expected
        if missing or extra:
            raise RuntimeError(
                f"Routing table for {role.value} is inconsistent: "
                f"missing={sorted(a.value for a in missing)} extra={sorted(a.value for a in extra)}"
            )
        if table.default not in table.views:
            raise RuntimeError(f"Default action for {role.value} is not a view")


check_routing_tables(ROUTING_TABLES)


def _member(actions, name):
    try:
        return actions(name)
    except ValueError:
        return None


def _authorize(principal, role):
    if principal is None:
        raise AuthenticationRequired('authentication required')
    if principal.role != role:
        raise AuthorizationDenied('authorization denied')


def route(principal, role, action_name, method, params=None):
    """Dispatch one request for ``role`` on behalf of ``principal``."""
    role = Role(role)
    table = ROUTING_TABLES[role]
    method = (method or '').upper()
    params = params if params is not None else {}
    try:
        _authorize(principal, role)
    except (AuthenticationRequired, AuthorizationDenied) as e:
        logger.info(f"Login redirect for {method} {role.value}/{action_name}: {e}")
        return LoginRedirect(str(e))

    if method in ('GET', 'HEAD'):
        action = _member(table.views, action_name) or table.default
    elif method == 'POST' and table.commands is not None:
        action = _member(table.commands, action_name)
        if action is None:
            logger.warning(f"Unknown POST action {action_name!r} from {principal.username}")
            raise UnknownAction(action_name)
    else:
        raise UnknownAction(action_name, method)

    handler = table.handlers[action]
    try:
        return handler(principal, params)
    except StorageUnavailable as e:
        logger.exception(f"{method} {role.value}/{action.value} aborted")
        raise RequestFailed(f"{action.value} could not be completed") from e
