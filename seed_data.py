from campussync import app
from campussync.auth import hash_password
from campussync.errors import ConstraintViolation
from campussync.models import Admin, Student, Faculty, Course, Subject, Notice, AttendanceRecord, MarkRecord
from campussync.repositories import (
    AdminRepository, StudentRepository, FacultyRepository, CourseRepository,
    SubjectRepository, NoticeRepository, AttendanceRepository, MarkRepository,
)
from datetime import date, timedelta
import random

def _try_insert(insert, record):
    try:
        return insert(record)
    except ConstraintViolation:
        return None

def seed():
    with app.app_context():
        print("Seeding database...")
        admins = AdminRepository()
        students_repo = StudentRepository()
        faculty_repo = FacultyRepository()
        courses_repo = CourseRepository()
        subjects_repo = SubjectRepository()

        # Create Admin User if not exists
        if not admins.find_by_username('admin'):
            admins.insert(Admin(username='admin', password_hash=hash_password('admin')))
            print("Created admin user.")

        # Create Faculty
        departments = ['Computer Science', 'Mathematics', 'Physics', 'Electronics']
        for i, dept in enumerate(departments, start=1):
            _try_insert(faculty_repo.insert, Faculty(
                name=f"Faculty {i}",
                email=f"faculty{i}@campus.edu",
                password_hash=hash_password(f"faculty{i}pass"),
                department=dept,
            ))
        faculty = faculty_repo.list_all()
        print(f"{len(faculty)} faculty members.")

        # Create Courses
        for name in ('B.Tech CSE', 'B.Tech ECE', 'B.Sc Mathematics'):
            _try_insert(courses_repo.insert, Course(name=name))
        courses = courses_repo.list_all()
        print(f"{len(courses)} courses.")

        # Create Subjects, one per faculty member per course
        if not subjects_repo.list_all():
            titles = ['Data Structures', 'Linear Algebra', 'Quantum Mechanics', 'Digital Circuits']
            for c in courses:
                for f, title in zip(faculty, titles):
                    subjects_repo.insert(Subject(name=f"{title} ({c.name})", course_id=c.id, faculty_id=f.id))
        subjects = subjects_repo.list_all()
        print(f"{len(subjects)} subjects.")

        # Create Students
        for i in range(1, 21):
            _try_insert(students_repo.insert, Student(
                name=f"Student {i}",
                email=f"student{i}@campus.edu",
                password_hash=hash_password(f"student{i}pass"),
                course=random.choice(courses).name,
                semester=random.randint(1, 8),
            ))
        students = students_repo.list_all()
        print(f"{len(students)} students.")

        # Attendance and marks stand in for the grading/attendance-entry process
        attendance_repo = AttendanceRepository()
        marks_repo = MarkRepository()
        for s in students:
            taken = [sub for sub in subjects if sub.name.endswith(f"({s.course})")]
            for sub in taken:
                for d in range(5):
                    _try_insert(attendance_repo.insert, AttendanceRecord(
                        student_id=s.id,
                        subject_id=sub.id,
                        date=date.today() - timedelta(days=d * 7),
                        status=random.choice(['present', 'present', 'present', 'absent']),
                    ))
                _try_insert(marks_repo.insert, MarkRecord(student_id=s.id, subject_id=sub.id, score=random.randint(35, 100)))
        print("Created attendance and marks.")

        notices_repo = NoticeRepository()
        if not notices_repo.list_all():
            notices_repo.insert(Notice(title="Welcome", message="The new semester starts on Monday."))
            notices_repo.insert(Notice(title="Exam schedule", message="Mid-term exams begin in week 8."))
        print("Seeding complete.")

if __name__ == "__main__":
    seed()
