import unittest
from datetime import date
from urllib.parse import parse_qs, urlparse

from helpers import PortalTestCase, Role


class AdminPanelTests(PortalTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.add_admin()

    def test_unauthenticated_admin_pages_redirect_to_login(self):
        for action in ('dashboard', 'students', 'faculty', 'courses', 'subjects', 'notices', 'addSubject'):
            response = self.client.get(f'/adminPanel?action={action}')
            self.assertEqual(response.status_code, 302, action)
            self.assertIn('/login', response.headers['Location'])

    def test_login_returns_to_the_requested_page_with_its_query(self):
        response = self.client.get('/adminPanel?action=subjects')
        next_url = parse_qs(urlparse(response.headers['Location']).query)['next'][0]
        self.assertEqual(next_url, '/adminPanel?action=subjects')
        response = self.client.post('/login', query_string={'next': next_url},
                                    data={'portal': 'admin', 'username': 'admin', 'password': 'admin-pass-1'})
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers['Location'].endswith('/adminPanel?action=subjects'))

    def test_head_request_is_served_like_get(self):
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.head('/adminPanel?action=students')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, b'')

    def test_student_session_cannot_open_admin_pages(self):
        student = self.add_student()
        self.login_as(Role.STUDENT, student)
        response = self.client.get('/adminPanel?action=students', follow_redirects=True)
        self.assertIn(b'Please log in to access this page.', response.data)
        self.assertNotIn(b'asha@campus.edu</td>', response.data)

    def test_students_listing(self):
        self.add_student(name='Asha Kumar')
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.get('/adminPanel?action=students')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'Asha Kumar', response.data)

    def test_add_student_redirects_instead_of_rendering(self):
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.post('/adminPanel', data={
            'action': 'addStudent', 'name': 'Bala', 'email': 'bala@campus.edu',
            'password': 'student-pass-1', 'course': 'B.Tech CSE', 'semester': '2'})
        self.assertEqual(response.status_code, 302)
        self.assertIn('action=students', response.headers['Location'])
        response = self.client.get(response.headers['Location'])
        self.assertIn(b'Student added.', response.data)
        self.assertIn(b'bala@campus.edu', response.data)

    def test_failed_add_shows_message(self):
        self.add_course('MBA')
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.post('/adminPanel', data={'action': 'addCourse', 'course_name': 'MBA'},
                                    follow_redirects=True)
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'Could not add course', response.data)

    def test_subjects_page_shows_joined_names(self):
        course = self.add_course('B.Tech CSE')
        faculty = self.add_faculty(name='Dr. Rao')
        self.add_subject('Data Structures', course, faculty)
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.get('/adminPanel?action=subjects')
        self.assertEqual(response.status_code, 200)
        for text in (b'Data Structures', b'B.Tech CSE', b'Dr. Rao'):
            self.assertIn(text, response.data)

    def test_unknown_post_action_is_bad_request(self):
        self.login_as(Role.ADMIN, self.admin)
        response = self.client.post('/adminPanel', data={'action': 'dropTables'})
        self.assertEqual(response.status_code, 400)

    def test_storage_failure_is_generic_error(self):
        self.login_as(Role.ADMIN, self.admin)
        self.drop_table('notice')
        response = self.client.get('/adminPanel?action=notices')
        self.assertEqual(response.status_code, 500)
        self.assertIn(b'could not be completed', response.data)


class StudentPanelTests(PortalTestCase):

    def setUp(self):
        super().setUp()
        course = self.add_course()
        faculty = self.add_faculty()
        ds = self.add_subject('Data Structures', course, faculty)
        la = self.add_subject('Linear Algebra', course, faculty)
        self.asha = self.add_student()
        bala = self.add_student(name='Bala', email='bala@campus.edu')
        self.add_attendance(self.asha, ds, date(2025, 2, 3))
        self.add_attendance(bala, la, date(2025, 2, 3))
        self.add_mark(self.asha, ds, 88)
        self.add_mark(bala, la, 42)

    def test_attendance_page_shows_only_own_records(self):
        self.login_as(Role.STUDENT, self.asha)
        response = self.client.get('/studentPanel?action=attendance')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'Data Structures', response.data)
        self.assertNotIn(b'Linear Algebra', response.data)

    def test_marks_page_shows_only_own_marks(self):
        self.login_as(Role.STUDENT, self.asha)
        response = self.client.get('/studentPanel?action=marks')
        self.assertIn(b'88', response.data)
        self.assertNotIn(b'Linear Algebra', response.data)

    def test_default_is_dashboard(self):
        self.login_as(Role.STUDENT, self.asha)
        response = self.client.get('/studentPanel')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'Welcome, asha@campus.edu', response.data)

    def test_notices_visible_to_students(self):
        admin = self.add_admin()
        self.login_as(Role.ADMIN, admin)
        self.client.post('/adminPanel', data={'action': 'saveNotice', 'title': 'Exam week',
                                              'message': 'Mid-terms start Monday.'})
        self.login_as(Role.STUDENT, self.asha)
        response = self.client.get('/studentPanel?action=notices')
        self.assertIn(b'Exam week', response.data)

    def test_students_cannot_post(self):
        self.login_as(Role.STUDENT, self.asha)
        response = self.client.post('/studentPanel', data={'action': 'attendance'})
        self.assertEqual(response.status_code, 400)


class FacultyPanelTests(PortalTestCase):

    def test_faculty_sees_own_subjects(self):
        course = self.add_course()
        rao = self.add_faculty()
        iyer = self.add_faculty(name='Dr. Iyer', email='iyer@campus.edu')
        self.add_subject('Compilers', course, rao)
        self.add_subject('Signals', course, iyer)
        self.login_as(Role.FACULTY, rao)
        response = self.client.get('/facultyPanel?action=subjects')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'Compilers', response.data)
        self.assertNotIn(b'Signals', response.data)


if __name__ == "__main__":
    unittest.main()
