"""Enumerations describing the campus: blocks, hall types, departments."""

from enum import Enum


class Block(str, Enum):
    """Location groups halls belong to."""

    EAST = "East Block"
    WEST = "West Block"
    MAIN = "Main Block"
    DIPLOMA = "Diploma Block"


class HallType(str, Enum):
    AUDITORIUM = "Auditorium"
    SMART_CLASSROOM = "Smart Classroom"


class InstitutionType(str, Enum):
    SCHOOL = "School"
    DIPLOMA = "Diploma"
    POLYTECHNIC = "Polytechnic"
    ENGINEERING = "Engineering"


class Department(str, Enum):
    """Departments that can request halls."""

    CSE = "CSE"
    IT = "IT"
    ECE = "ECE"
    EEE = "EEE"
    MECH = "MECH"
    CIVIL = "CIVIL"
    AERO = "AERO"
    CHEMICAL = "CHEMICAL"
    AIDS = "AIDS"
    CSBS = "CSBS"
    MCA = "MCA"
    MBA = "MBA"
    TRAINING = "TRAINING"
    PLACEMENT = "PLACEMENT"
    SCIENCE_HUMANITIES = "SCIENCE & HUMANITIES"
    HR = "HR"
    INNOVATION = "INNOVATION"
    AI_ML = "AI_ML"


# Fixed reporting order; statistics always list every department.
ALL_DEPARTMENTS: list[str] = [d.value for d in Department]
