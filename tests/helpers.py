import unittest
import sys
import os

# Set environment to testing before importing app
os.environ['FLASK_ENV'] = 'testing'

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy import text

from campussync import app, db
from campussync.auth import hash_password
from campussync.models import Admin, AttendanceRecord, Course, Faculty, MarkRecord, Student, Subject
from campussync.principal import Principal, Role


class PortalTestCase(unittest.TestCase):
    """Fresh in-memory database and an application context per test."""

    def setUp(self):
        self.app = app
        self.app.config['TESTING'] = True
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    # --- fixtures ---

    def add_admin(self, username='admin', password='admin-pass-1'):
        admin = Admin(username=username, password_hash=hash_password(password))
        db.session.add(admin)
        db.session.commit()
        return admin

    def add_student(self, name='Asha', email='asha@campus.edu', password='student-pass-1', course='B.Tech CSE', semester=3):
        student = Student(name=name, email=email, password_hash=hash_password(password), course=course, semester=semester)
        db.session.add(student)
        db.session.commit()
        return student

    def add_faculty(self, name='Dr. Rao', email='rao@campus.edu', password='faculty-pass-1', department='Computer Science'):
        faculty = Faculty(name=name, email=email, password_hash=hash_password(password), department=department)
        db.session.add(faculty)
        db.session.commit()
        return faculty

    def add_course(self, name='B.Tech CSE'):
        course = Course(name=name)
        db.session.add(course)
        db.session.commit()
        return course

    def add_subject(self, name, course, faculty):
        subject = Subject(name=name, course_id=course.id, faculty_id=faculty.id)
        db.session.add(subject)
        db.session.commit()
        return subject

    def add_attendance(self, student, subject, day, status='present'):
        record = AttendanceRecord(student_id=student.id, subject_id=subject.id, date=day, status=status)
        db.session.add(record)
        db.session.commit()
        return record

    def add_mark(self, student, subject, score):
        record = MarkRecord(student_id=student.id, subject_id=subject.id, score=score)
        db.session.add(record)
        db.session.commit()
        return record

    def drop_table(self, name):
        db.session.execute(text(f"DROP TABLE {name}"))
        db.session.commit()

    # --- sessions ---

    def login_as(self, role, record):
        with self.client.session_transaction() as sess:
            sess['logged_in'] = True
            sess['role'] = role.value
            sess['user_id'] = record.id
            sess['user'] = getattr(record, 'email', None) or record.username


__all__ = ['PortalTestCase', 'Principal', 'Role', 'db']
