"""Constants and defaults."""

YEARS = ("1st", "2nd", "3rd", "4th")
SEMS = ("1", "2", "3", "4", "5", "6", "7", "8")
DIVS = ("A", "B", "C", "D")

SUBJECTS = (
    "Software Engineering",
    "Microprocessor",
    "Operating System",
    "Automata",
    "CN-1",
)

DEFAULT_YEAR = "2nd"
DEFAULT_SEM = "3"
DEFAULT_DIV = "A"
DEFAULT_DEPARTMENT = "Computer Science"

DEFAULT_WRITE_WORKERS = 8
DEFAULT_LEAVE_LIST_LIMIT = 200

ALLOWED_IMPORT_EXTENSIONS = (".xlsx", ".xls")
