from .api import PowerSchoolAPI
from .transport import PublicPortalTransport, Transport
from .user import PowerSchoolUser, assemble_student_info, extract_student_data

__all__ = [
    "PowerSchoolAPI",
    "PowerSchoolUser",
    "PublicPortalTransport",
    "Transport",
    "assemble_student_info",
    "extract_student_data",
]
