from campussync import db
from datetime import datetime

# Foreign keys are declared for the schema but no relationships or cascades:
# removing a course or faculty member leaves its subjects in place.

class Admin(db.Model):
    __tablename__ = 'admin'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)

    def __repr__(self):
        return f"Admin('{self.username}')"

class Student(db.Model):
    __tablename__ = 'student'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    course = db.Column(db.String(100), nullable=False)  # course name, not a foreign key
    semester = db.Column(db.Integer, nullable=False)

    def __repr__(self):
        return f"Student('{self.name}', '{self.email}', course='{self.course}', semester={self.semester})"

class Faculty(db.Model):
    __tablename__ = 'faculty'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    department = db.Column(db.String(100), nullable=False)

    def __repr__(self):
        return f"Faculty('{self.name}', '{self.email}', department='{self.department}')"

class Course(db.Model):
    __tablename__ = 'course'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"Course('{self.name}')"

class Subject(db.Model):
    __tablename__ = 'subject'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=False)
    faculty_id = db.Column(db.Integer, db.ForeignKey('faculty.id'), nullable=False)

    def __repr__(self):
        return f"Subject('{self.name}', course_id={self.course_id}, faculty_id={self.faculty_id})"

class Notice(db.Model):
    __tablename__ = 'notice'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    posted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"Notice('{self.title}', posted_at='{self.posted_at}')"

class AttendanceRecord(db.Model):
    __tablename__ = 'attendance'
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False)  # present, absent
    __table_args__ = (db.UniqueConstraint('student_id', 'subject_id', 'date', name='uix_attendance_student_subject_date'),)

    def __repr__(self):
        return f"AttendanceRecord(student_id={self.student_id}, subject_id={self.subject_id}, date='{self.date}', status='{self.status}')"

class MarkRecord(db.Model):
    __tablename__ = 'marks'
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    score = db.Column(db.Float, nullable=False)
    __table_args__ = (db.UniqueConstraint('student_id', 'subject_id', name='uix_marks_student_subject'),)

    def __repr__(self):
        return f"MarkRecord(student_id={self.student_id}, subject_id={self.subject_id}, score={self.score})"
