"""Data access for every table in the portal.

Each repository owns the queries for one entity family. Values are always
bound as query parameters by SQLAlchemy, list operations return fully
materialized lists, and every failure is translated into the package's
error taxonomy:

* ``IntegrityError`` on insert -> ``ConstraintViolation``
* any other ``SQLAlchemyError`` -> ``StorageUnavailable``

An insert either returns the generated id or raises.
"""
import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from campussync import db
from campussync.errors import AuthorizationDenied, ConstraintViolation, StorageUnavailable
from campussync.models import Admin, AttendanceRecord, Course, Faculty, MarkRecord, Notice, Student, Subject
from campussync.principal import Role

logger = logging.getLogger(__name__)


def storage_guard(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable(f"{fn.__qualname__} failed: {e}") from e
    return wrapper


def _insert(record, label):
    try:
        db.session.add(record)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Rejected {label} insert: {e.orig}")
        raise ConstraintViolation(f"{label} violates a uniqueness or reference constraint") from e
    logger.info(f"Inserted {label} id={record.id}")
    return record.id


def _require_role(principal, role):
    if principal is None or principal.role != role:
        raise AuthorizationDenied(f"Query is scoped to {role.value} principals")


class AdminRepository:

    @storage_guard
    def insert(self, admin):
        return _insert(admin, 'admin')

    @storage_guard
    def find_by_username(self, username):
        return Admin.query.filter_by(username=username).first()

    @storage_guard
    def set_password(self, admin, password_hash):
        admin.password_hash = password_hash
        db.session.commit()
        logger.info(f"Reset password for admin id={admin.id}")


class StudentRepository:

    @storage_guard
    def insert(self, student):
        return _insert(student, 'student')

    @storage_guard
    def list_all(self):
        return Student.query.order_by(Student.name.asc(), Student.id.asc()).all()

    @storage_guard
    def find_by_email(self, email):
        return Student.query.filter_by(email=email).first()

    @storage_guard
    def count(self):
        return Student.query.count()


class FacultyRepository:

    @storage_guard
    def insert(self, faculty):
        return _insert(faculty, 'faculty')

    @storage_guard
    def list_all(self):
        return Faculty.query.order_by(Faculty.name.asc(), Faculty.id.asc()).all()

    @storage_guard
    def find_by_email(self, email):
        return Faculty.query.filter_by(email=email).first()

    @storage_guard
    def count(self):
        return Faculty.query.count()


class CourseRepository:

    @storage_guard
    def insert(self, course):
        return _insert(course, 'course')

    @storage_guard
    def list_all(self):
        return Course.query.order_by(Course.name.asc(), Course.id.asc()).all()

    @storage_guard
    def count(self):
        return Course.query.count()


class SubjectRepository:
    """Subjects, optionally enriched with course and faculty names.

    The joined listings use outer joins: a subject whose course or faculty
    row has disappeared is still returned, with ``None`` in the name
    columns.
    """

    @storage_guard
    def insert(self, subject):
        # SQLite does not enforce foreign keys unless asked to, so check here.
        if db.session.get(Course, subject.course_id) is None:
            raise ConstraintViolation(f"Course {subject.course_id} does not exist")
        if db.session.get(Faculty, subject.faculty_id) is None:
            raise ConstraintViolation(f"Faculty {subject.faculty_id} does not exist")
        return _insert(subject, 'subject')

    @storage_guard
    def list_all(self):
        return Subject.query.order_by(Subject.name.asc(), Subject.id.asc()).all()

    def _joined(self):
        return (
            db.session.query(
                Subject.id.label('subject_id'),
                Subject.name.label('subject_name'),
                Subject.course_id,
                Course.name.label('course_name'),
                Subject.faculty_id,
                Faculty.name.label('faculty_name'),
            )
            .outerjoin(Course, Subject.course_id == Course.id)
            .outerjoin(Faculty, Subject.faculty_id == Faculty.id)
        )

    @storage_guard
    def list_joined(self):
        return self._joined().order_by(Subject.name.asc(), Subject.id.asc()).all()

    @storage_guard
    def find_for_faculty(self, principal):
        _require_role(principal, Role.FACULTY)
        return (
            self._joined()
            .filter(Subject.faculty_id == principal.principal_id)
            .order_by(Subject.name.asc(), Subject.id.asc())
            .all()
        )


class NoticeRepository:

    @storage_guard
    def insert(self, notice):
        return _insert(notice, 'notice')

    @storage_guard
    def list_all(self):
        # Most recent first; id breaks ties between notices posted in the same instant.
        return Notice.query.order_by(Notice.posted_at.desc(), Notice.id.desc()).all()


class AttendanceRepository:
    """Attendance rows, only ever read for the student they belong to."""

    @storage_guard
    def insert(self, record):
        return _insert(record, 'attendance')

    @storage_guard
    def find_for_principal(self, principal):
        _require_role(principal, Role.STUDENT)
        return (
            db.session.query(
                AttendanceRecord.student_id,
                AttendanceRecord.subject_id,
                Subject.name.label('subject_name'),
                AttendanceRecord.date,
                AttendanceRecord.status,
            )
            .outerjoin(Subject, AttendanceRecord.subject_id == Subject.id)
            .filter(AttendanceRecord.student_id == principal.principal_id)
            .order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.asc())
            .all()
        )


class MarkRepository:
    """Marks, one per student and subject, read only for their owner."""

    @storage_guard
    def insert(self, record):
        return _insert(record, 'marks')

    @storage_guard
    def find_for_principal(self, principal):
        _require_role(principal, Role.STUDENT)
        return (
            db.session.query(
                MarkRecord.student_id,
                MarkRecord.subject_id,
                Subject.name.label('subject_name'),
                MarkRecord.score,
            )
            .outerjoin(Subject, MarkRecord.subject_id == Subject.id)
            .filter(MarkRecord.student_id == principal.principal_id)
            .order_by(Subject.name.asc(), MarkRecord.id.asc())
            .all()
        )
