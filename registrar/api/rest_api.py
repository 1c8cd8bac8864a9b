"""
REST API for the registrar using FastAPI.
"""

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from ..core.entities import Student, Instructor, Course, CourseBuilder, Enrollment
from ..core.enums import Grade, Semester, DATE_FORMAT
from ..core.exceptions import (
    RegistrarException, ValidationError, ResourceNotFoundError, EnrollmentError,
)
from ..persistence import ImportExportService, TransferResult
from ..services import EnrollmentService, RecordsService, BackupService, total_credits

# Flat files cannot hold commas or line boundaries, so free text must not either.
TEXT_PATTERN = r'^[^,\r\n\x0b\x0c\x1c-\x1e\x85\u2028\u2029]+$'
EMAIL_PATTERN = r'^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$'
DATE_PATTERN = r'^\d{2}-\d{2}-\d{4}$'
REG_NO_PATTERN = r'^\d{2}[A-Z]{3}\d{5}$'
COURSE_CODE_PATTERN = r'^[A-Z]{3}\d{4}$'
EMPLOYEE_ID_PATTERN = r'^[A-Z]{3}\d{3}$'


# Pydantic models for API
class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class StudentCreate(RequestModel):
    full_name: str = Field(..., min_length=1, max_length=100, pattern=TEXT_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    date_of_birth: str = Field(..., pattern=DATE_PATTERN, description="dd-MM-yyyy")
    reg_no: str = Field(..., pattern=REG_NO_PATTERN)


class StudentUpdate(RequestModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100, pattern=TEXT_PATTERN)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)


class StudentResponse(BaseModel):
    reg_no: str
    full_name: str
    email: str
    date_of_birth: str
    is_active: bool
    total_credits: int
    enrolled_courses: List[str] = []


class InstructorCreate(RequestModel):
    instructor_id: str = Field(..., min_length=1, max_length=20, pattern=TEXT_PATTERN)
    full_name: str = Field(..., min_length=1, max_length=100, pattern=TEXT_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    date_of_birth: str = Field(..., pattern=DATE_PATTERN, description="dd-MM-yyyy")
    employee_id: str = Field(..., pattern=EMPLOYEE_ID_PATTERN)
    department: str = Field(..., min_length=1, max_length=100, pattern=TEXT_PATTERN)


class InstructorResponse(BaseModel):
    instructor_id: str
    employee_id: str
    full_name: str
    email: str
    date_of_birth: str
    department: str
    assigned_courses: List[str] = []


class CourseCreate(RequestModel):
    code: str = Field(..., pattern=COURSE_CODE_PATTERN)
    title: str = Field(..., min_length=1, max_length=200, pattern=TEXT_PATTERN)
    credits: int = Field(..., ge=1, le=20)
    department: str = Field(..., min_length=1, max_length=100, pattern=TEXT_PATTERN)
    semester: str = Field(..., description="FALL, INTERIM or WINTER")
    instructor_employee_id: Optional[str] = Field(None, pattern=EMPLOYEE_ID_PATTERN)

    @field_validator("semester")
    @classmethod
    def _known_semester(cls, value: str) -> str:
        name = value.strip().upper()
        if name not in Semester.__members__:
            raise ValueError(f"Invalid semester '{value}'. Use FALL, INTERIM or WINTER.")
        return name


class CourseResponse(BaseModel):
    code: str
    title: str
    credits: int
    department: str
    semester: str
    instructor_employee_id: Optional[str] = None
    instructor_name: Optional[str] = None


class InstructorAssignment(RequestModel):
    employee_id: str = Field(..., pattern=EMPLOYEE_ID_PATTERN)


class EnrollmentRequest(RequestModel):
    reg_no: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)


class GradeRequest(RequestModel):
    reg_no: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    grade: str = Field(..., pattern=r'^[SABCDEFsabcdef]$')


class EnrollmentResponse(BaseModel):
    success: bool
    message: str
    status: str


class EnrollmentDetail(BaseModel):
    course_code: str
    title: str
    credits: int
    grade: Optional[str] = None
    enrolled_on: datetime


class GpaResponse(BaseModel):
    reg_no: str
    gpa: float


class TranscriptResponse(BaseModel):
    reg_no: str
    gpa: float
    enrollments: List[EnrollmentDetail]
    transcript: str


class TransferResponse(BaseModel):
    entity_type: str
    operation: str
    success: bool
    processed: int
    skipped: int
    errors: List[str] = []


class BackupResponse(BaseModel):
    success: bool
    message: str
    path: Optional[str] = None
    backup_size: int


class StatisticsResponse(BaseModel):
    success: bool
    message: str
    statistics: Dict[str, Any]


def _parse_birth_date(value: str) -> date:
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Invalid date '{value}'. Please use dd-MM-yyyy.")
    if parsed > date.today():
        raise ValidationError("Invalid date of birth - cannot be in the future")
    return parsed


class RegistrarRestAPI:
    """REST API over the records, enrollment rules and data files."""

    def __init__(self, records: RecordsService, enrollment_service: EnrollmentService,
                 io_service: ImportExportService, backup_service: BackupService):
        self._records = records
        self._enrollment_service = enrollment_service
        self._io_service = io_service
        self._backup_service = backup_service

        # Create FastAPI app
        self.app = FastAPI(
            title="Registrar API",
            description="Academic records: students, instructors, courses, enrollments and grades",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        # Add CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Setup routes
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "Registrar API",
                "version": "1.0.0",
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def create_student(student_data: StudentCreate):
            """Create a new student."""
            try:
                if self._records.find_student(student_data.reg_no) is not None:
                    raise HTTPException(status_code=409, detail="Student already exists")
                student = Student(
                    full_name=student_data.full_name,
                    email=student_data.email,
                    date_of_birth=_parse_birth_date(student_data.date_of_birth),
                    reg_no=student_data.reg_no,
                )
                return self._student_to_response(self._records.add_student(student))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(skip: int = 0, limit: int = 100):
            """List all students."""
            students = self._records.list_students()[skip:skip + limit]
            return [self._student_to_response(student) for student in students]

        @self.app.get("/students/{reg_no}", response_model=StudentResponse)
        async def get_student(reg_no: str):
            """Get a student by registration number."""
            try:
                return self._student_to_response(self._records.get_student(reg_no))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.patch("/students/{reg_no}", response_model=StudentResponse)
        async def update_student(reg_no: str, update: StudentUpdate):
            """Update a student's name and/or email."""
            try:
                student = self._records.update_student(reg_no, full_name=update.full_name, email=update.email)
                return self._student_to_response(student)
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.post("/students/{reg_no}/deactivate", response_model=StudentResponse)
        async def deactivate_student(reg_no: str):
            """Deactivate a student."""
            try:
                return self._student_to_response(self._records.deactivate_student(reg_no))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.get("/students/{reg_no}/gpa", response_model=GpaResponse)
        async def get_gpa(reg_no: str):
            """Get a student's cumulative GPA."""
            try:
                student = self._records.get_student(reg_no)
                return GpaResponse(reg_no=reg_no, gpa=self._enrollment_service.calculate_gpa(student))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.get("/students/{reg_no}/transcript", response_model=TranscriptResponse)
        async def get_transcript(reg_no: str):
            """Get a student's transcript."""
            try:
                student = self._records.get_student(reg_no)
                return TranscriptResponse(
                    reg_no=reg_no,
                    gpa=self._enrollment_service.calculate_gpa(student),
                    enrollments=[self._enrollment_to_detail(e) for e in student.enrollments],
                    transcript=self._enrollment_service.generate_transcript(student),
                )
            except RegistrarException as e:
                raise self._to_http_error(e)

        # Instructor endpoints
        @self.app.post("/instructors", response_model=InstructorResponse, status_code=status.HTTP_201_CREATED)
        async def create_instructor(instructor_data: InstructorCreate):
            """Create a new instructor."""
            try:
                if self._records.find_instructor(instructor_data.employee_id) is not None:
                    raise HTTPException(status_code=409, detail="Instructor already exists")
                instructor = Instructor(
                    instructor_id=instructor_data.instructor_id,
                    full_name=instructor_data.full_name,
                    email=instructor_data.email,
                    date_of_birth=_parse_birth_date(instructor_data.date_of_birth),
                    employee_id=instructor_data.employee_id,
                    department=instructor_data.department,
                )
                return self._instructor_to_response(self._records.add_instructor(instructor))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.get("/instructors", response_model=List[InstructorResponse])
        async def list_instructors():
            """List all instructors."""
            return [self._instructor_to_response(i) for i in self._records.list_instructors()]

        # Course endpoints
        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def create_course(course_data: CourseCreate):
            """Create a new course."""
            try:
                if self._records.find_course(course_data.code) is not None:
                    raise HTTPException(status_code=409, detail="Course already exists")
                instructor = None
                if course_data.instructor_employee_id:
                    instructor = self._records.get_instructor(course_data.instructor_employee_id)
                course = (CourseBuilder(course_data.code, course_data.title)
                          .credits(course_data.credits)
                          .department(course_data.department)
                          .semester(Semester[course_data.semester])
                          .instructor(instructor)
                          .build())
                return self._course_to_response(self._records.add_course(course))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses(department: Optional[str] = None, semester: Optional[str] = None):
            """List courses, optionally filtered by department and/or semester."""
            courses = self._records.list_courses()
            if department:
                wanted = {c.code for c in self._records.find_courses_by_department(department)}
                courses = [c for c in courses if c.code in wanted]
            if semester:
                try:
                    term = Semester[semester.upper()]
                except KeyError:
                    raise HTTPException(status_code=400, detail=f"Unknown semester: {semester}")
                courses = [c for c in courses if c.semester == term]
            return [self._course_to_response(course) for course in courses]

        @self.app.get("/courses/{code}", response_model=CourseResponse)
        async def get_course(code: str):
            """Get a course by code."""
            try:
                return self._course_to_response(self._records.get_course(code))
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.put("/courses/{code}/instructor", response_model=CourseResponse)
        async def assign_instructor(code: str, assignment: InstructorAssignment):
            """Assign an instructor to a course."""
            try:
                return self._course_to_response(self._records.assign_instructor(code, assignment.employee_id))
            except RegistrarException as e:
                raise self._to_http_error(e)

        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse)
        async def enroll_student(enrollment_data: EnrollmentRequest):
            """Enroll a student in a course."""
            try:
                student = self._records.get_student(enrollment_data.reg_no)
                course = self._records.get_course(enrollment_data.course_code)
                self._enrollment_service.ensure_active(student)
                result = self._enrollment_service.enroll_student(student, course)
                return EnrollmentResponse(
                    success=result.success,
                    message=result.message,
                    status=result.status.value
                )
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.delete("/enrollments/{reg_no}/{course_code}", response_model=EnrollmentResponse)
        async def unenroll_student(reg_no: str, course_code: str):
            """Unenroll a student. Not being enrolled is reported, not an error."""
            try:
                student = self._records.get_student(reg_no)
                course = self._records.get_course(course_code)
                result = self._enrollment_service.unenroll_student(student, course)
                return EnrollmentResponse(
                    success=result.success,
                    message=result.message,
                    status=result.status.value
                )
            except RegistrarException as e:
                raise self._to_http_error(e)

        @self.app.post("/grades", response_model=EnrollmentDetail)
        async def assign_grade(grade_data: GradeRequest):
            """Grade a student's enrollment."""
            try:
                student = self._records.get_student(grade_data.reg_no)
                course = self._records.get_course(grade_data.course_code)
                enrollment = self._enrollment_service.assign_grade(
                    student, course, Grade.from_name(grade_data.grade)
                )
                return self._enrollment_to_detail(enrollment)
            except RegistrarException as e:
                raise self._to_http_error(e)

        # Data file endpoints
        @self.app.post("/data/save", response_model=List[TransferResponse])
        async def save_data():
            """Export every record store to its file."""
            return [self._transfer_to_response(r) for r in self._io_service.save_all()]

        @self.app.post("/data/load", response_model=List[TransferResponse])
        async def load_data():
            """Replace the in-memory records with the contents of the data files."""
            self._records.store.clear()
            return [self._transfer_to_response(r) for r in self._io_service.load_all()]

        @self.app.post("/backups", response_model=BackupResponse)
        async def create_backup():
            """Back up the data directory."""
            try:
                path = self._backup_service.perform_backup()
            except RegistrarException as e:
                raise self._to_http_error(e)
            return BackupResponse(
                success=path is not None,
                message="Backup created" if path else "Data directory does not exist. Nothing to back up.",
                path=path,
                backup_size=self._backup_service.directory_size()
            )

        # Statistics endpoints
        @self.app.get("/statistics", response_model=StatisticsResponse)
        async def get_statistics():
            """Get record and enrollment statistics."""
            statistics = {
                "records": self._records.store.get_statistics(),
                "enrollment": self._enrollment_service.get_statistics(self._records.list_students()),
            }
            return StatisticsResponse(
                success=True,
                message="Statistics retrieved successfully",
                statistics=statistics
            )

    def _to_http_error(self, error: RegistrarException) -> HTTPException:
        """Map a registrar exception to an HTTP error."""
        if isinstance(error, ResourceNotFoundError):
            return HTTPException(status_code=404, detail=error.message)
        if isinstance(error, EnrollmentError):
            return HTTPException(
                status_code=409,
                detail={"error_code": error.error_code, "message": error.message}
            )
        if isinstance(error, ValidationError):
            return HTTPException(status_code=400, detail=error.message)
        return HTTPException(status_code=500, detail=f"Internal error: {error.message}")

    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        return StudentResponse(
            reg_no=student.reg_no,
            full_name=student.full_name,
            email=student.email,
            date_of_birth=student.date_of_birth.strftime(DATE_FORMAT),
            is_active=student.is_active,
            total_credits=total_credits(student),
            enrolled_courses=[e.course.code for e in student.enrollments]
        )

    def _instructor_to_response(self, instructor: Instructor) -> InstructorResponse:
        """Convert Instructor entity to response model."""
        return InstructorResponse(
            instructor_id=instructor.instructor_id,
            employee_id=instructor.employee_id,
            full_name=instructor.full_name,
            email=instructor.email,
            date_of_birth=instructor.date_of_birth.strftime(DATE_FORMAT),
            department=instructor.department,
            assigned_courses=[c.code for c in instructor.assigned_courses]
        )

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert Course entity to response model."""
        instructor = course.instructor
        return CourseResponse(
            code=course.code,
            title=course.title,
            credits=course.credits,
            department=course.department,
            semester=course.semester.name,
            instructor_employee_id=instructor.employee_id if instructor else None,
            instructor_name=instructor.full_name if instructor else None
        )

    def _enrollment_to_detail(self, enrollment: Enrollment) -> EnrollmentDetail:
        return EnrollmentDetail(
            course_code=enrollment.course.code,
            title=enrollment.course.title,
            credits=enrollment.course.credits,
            grade=enrollment.grade.name if enrollment.grade else None,
            enrolled_on=enrollment.created_at
        )

    def _transfer_to_response(self, result: TransferResult) -> TransferResponse:
        return TransferResponse(
            entity_type=result.entity_type.value,
            operation=result.operation,
            success=result.success,
            processed=result.processed,
            skipped=result.skipped,
            errors=result.errors
        )
