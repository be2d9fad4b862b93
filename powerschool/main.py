import argparse
import logging
import sys
from typing import List, Optional

from powerschool.client import PowerSchoolAPI
from powerschool.core.config import Config
from powerschool.core.exceptions import PowerSchoolError
from powerschool.models import StudentInfo

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:  # Only add handler if none exists
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.INFO)
        logging.debug("Basic logging initialized")


def setup_logging(config: Config, level_override: Optional[str] = None) -> None:
    """Apply the configured log level and optional log file"""
    logging_config = config.get_section("logging")
    level_name = (level_override or logging_config.get("level") or "INFO").upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    log_file = logging_config.get("file")
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)


def format_summary(info: StudentInfo) -> List[str]:
    """Human-readable lines describing one snapshot"""
    student = info.student
    lines = [f"{student.get_formatted_name(include_middle_name=True)} (grade {student.grade_level}, year {info.year_id})"]
    for course in sorted(info.courses, key=lambda c: (c.period_sort is None, c.period_sort or 0)):
        term = course.get_term()
        teacher = course.get_teacher()
        final_grade = course.get_final_grade()
        grade = "-"
        if final_grade is not None:
            grade = final_grade.grade or "-"
            if final_grade.percentage is not None:
                grade += f" ({final_grade.percentage:g})"
        lines.append(
            f"  {course.title or course.code or course.id}"
            f" | {term.title if term else '-'}"
            f" | {teacher.get_formatted_name() if teacher else '-'}"
            f" | {grade}"
            f" | {len(course.get_assignments())} assignment(s)"
        )
    for category in info.assignment_categories:
        lines.append(f"  [{category.name}] {len(category.assignments)} assignment(s)")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    setup_basic_logging()

    parser = argparse.ArgumentParser(description='Fetch and summarize PowerSchool student data')
    parser.add_argument('--config',
                        help='Path to config file (default: ./config.yaml)')
    parser.add_argument('--log-level',
                        help='Override logging.level from the config file')
    args = parser.parse_args(argv)

    api = None
    try:
        config = Config(config_path=args.config)
        setup_logging(config, args.log_level)
        api = PowerSchoolAPI.from_config(config).setup()
        user = api.login(
            config.require("powerschool", "username"),
            config.require("powerschool", "password"),
        )
        if user is None:
            logging.error("Login failed: invalid username or password")
            return 1
        info = user.get_student_info()
        for line in format_summary(info):
            print(line)
    except PowerSchoolError as e:
        logging.error(f"{e.__class__.__name__}: {e}")
        return 1
    finally:
        if api is not None:
            api.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
