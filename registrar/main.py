"""
Main entry point for the registrar.
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from .config import RegistrarConfig, load_config
from .core.entities import Student, Instructor, CourseBuilder
from .core.enums import Grade, Semester
from .core.exceptions import ConfigurationError, EnrollmentError, RegistrarException
from .persistence import DataStore, ImportExportService, TransferResult
from .services import EnrollmentService, RecordsService, BackupService
from .api.rest_api import RegistrarRestAPI

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


class RegistrarPlatform:
    """Wires the record stores, services and API together."""

    def __init__(self, config: Optional[RegistrarConfig] = None):
        self._config = config or RegistrarConfig()
        self._store = None
        self._records = None
        self._enrollment_service = None
        self._io_service = None
        self._backup_service = None
        self._rest_api = None

        self._initialize_platform()

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        self._store = DataStore()
        self._records = RecordsService(self._store)
        self._enrollment_service = EnrollmentService(max_credits=self._config.max_credits)
        self._io_service = ImportExportService(self._store, self._enrollment_service, self._config.data_dir)
        self._backup_service = BackupService(self._config.data_dir, self._config.backup_dir)
        self._rest_api = RegistrarRestAPI(
            self._records,
            self._enrollment_service,
            self._io_service,
            self._backup_service
        )
        logger.info("Registrar initialized (data dir: %s, credit ceiling: %d)",
                    self._config.data_dir, self._config.max_credits)

    @property
    def config(self) -> RegistrarConfig:
        return self._config

    @property
    def store(self) -> DataStore:
        return self._store

    @property
    def records(self) -> RecordsService:
        return self._records

    @property
    def enrollment_service(self) -> EnrollmentService:
        return self._enrollment_service

    @property
    def io_service(self) -> ImportExportService:
        return self._io_service

    @property
    def backup_service(self) -> BackupService:
        return self._backup_service

    @property
    def app(self):
        return self._rest_api.app

    def load_data(self) -> List[TransferResult]:
        """Load every data file into the record stores."""
        print("Loading data from files...")
        results = self._io_service.load_all()
        self._report(results)
        if self._store.is_empty():
            print("No data found. You can add new students and courses.")
        return results

    def save_data(self) -> List[TransferResult]:
        """Save every record store to its data file."""
        print("Saving all data to files...")
        results = self._io_service.save_all()
        self._report(results)
        return results

    def _report(self, results: List[TransferResult]) -> None:
        for result in results:
            mark = "✓" if result.success else "✗"
            line = f"{mark} {result.operation} {result.entity_type.value}s: {result.processed} records"
            if result.skipped:
                line += f", {result.skipped} skipped"
            print(line)

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the REST server until interrupted."""
        import uvicorn

        host = host or self._config.rest_host
        port = port or self._config.rest_port
        print(f"✓ REST server starting on http://{host}:{port} (docs at /docs)")
        uvicorn.run(
            self._rest_api.app,
            host=host,
            port=port,
            log_level=self._config.log_level.lower()
        )

    def create_sample_data(self):
        """Create sample records for demonstration."""
        print("Creating sample data...")

        instructor = self._records.add_instructor(Instructor(
            "I001", "Ravi Kumar", "ravi.kumar@college.edu", date(1980, 4, 12), "EMP001", "Computer Science"
        ))

        courses = [
            CourseBuilder("CSE0001", "Programming in Python").credits(4)
                .department("Computer Science").semester(Semester.FALL).build(),
            CourseBuilder("CSE0002", "Data Structures").credits(4)
                .department("Computer Science").semester(Semester.FALL).build(),
            CourseBuilder("MAT0001", "Linear Algebra").credits(3)
                .department("Mathematics").semester(Semester.WINTER).build(),
        ]
        for course in courses:
            self._records.add_course(course)
        self._records.assign_instructor("CSE0001", instructor.employee_id)

        students = [
            Student("Asha Verma", "asha.verma@college.edu", date(2005, 3, 21), "24BCE10001"),
            Student("Rohan Mehta", "rohan.mehta@college.edu", date(2004, 11, 2), "24BCE10002"),
        ]
        for student in students:
            self._records.add_student(student)

        print("✓ Sample data created")

    def run_demo(self):
        """Run a demonstration of the enrollment rules."""
        print("Running registrar demonstration...")
        if self._records.find_student("24BCE10001") is None:
            self.create_sample_data()

        asha = self._records.get_student("24BCE10001")
        for code in ("CSE0001", "CSE0002"):
            try:
                course = self._records.get_course(code)
                self._enrollment_service.ensure_active(asha)
                result = self._enrollment_service.enroll_student(asha, course)
                print(f"✓ {result.message}")
            except EnrollmentError as e:
                print(f"✗ Enrollment Error: {e.message}")
            except RegistrarException as e:
                print(f"✗ Error: {e.message}")

        try:
            self._enrollment_service.assign_grade(asha, self._records.get_course("CSE0001"), Grade.A)
            print("✓ Graded CSE0001: A")
        except RegistrarException as e:
            print(f"✗ Grading Error: {e.message}")

        print()
        print(self._enrollment_service.generate_transcript(asha))
        print("\n✓ Demo completed")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Registrar academic records manager")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--data-dir", type=str, help="Directory holding the CSV data files")
    parser.add_argument("--backup-dir", type=str, help="Directory receiving backups")
    parser.add_argument("--max-credits", type=int, help="Credit ceiling per student")
    parser.add_argument("--log-level", type=str, help="Logging level")
    parser.add_argument("--rest-host", type=str, help="REST server host")
    parser.add_argument("--rest-port", type=int, help="REST server port")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--serve", action="store_true", help="Serve the REST API")

    args = parser.parse_args()

    try:
        config = load_config(args.config, {
            'data_dir': args.data_dir,
            'backup_dir': args.backup_dir,
            'max_credits': args.max_credits,
            'log_level': args.log_level,
            'rest_host': args.rest_host,
            'rest_port': args.rest_port,
        })
    except ConfigurationError as e:
        print(f"Error: {e.message}")
        sys.exit(2)

    configure_logging(config.log_level)
    platform = RegistrarPlatform(config)
    platform.load_data()

    try:
        if args.demo:
            platform.run_demo()
        elif args.serve:
            platform.start_rest_server()
        else:
            parser.print_help()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        platform.save_data()


if __name__ == "__main__":
    main()
