"""
Centralized constants for the system.
Removes "magic strings" and gives strong typing to common values.
"""

from enum import Enum, unique


@unique
class UserRole(str, Enum):
    """Staff roles."""

    SUPERADMIN = "Super Admin"
    HELPDESK = "Helpdesk"
    CASH_MANAGEMENT = "Cash Management"
    TECHNICIAN = "Technician"


@unique
class MenuPermission(str, Enum):
    """Menu entries a user may be allowed to open."""

    DASHBOARD = "dashboard"
    USERS = "users"
    REPORTS = "reports"
    SETTINGS = "settings"
    LOCATIONS = "locations"
    LOG_ACTIVITY = "log_activity"
    MAIL = "mail"
    DATA_MASTER = "data_master"
    MASTER_CATEGORY = "master_category"
    MASTER_COMPLAINT_CATEGORY = "master_complaint_category"
    MASTER_INFO = "master_info"
    MASTER_BANK = "master_bank"
    COMPLAINTS = "complaints"


DEFAULT_ROLE_PERMISSIONS = {
    UserRole.SUPERADMIN: [
        MenuPermission.DASHBOARD,
        MenuPermission.USERS,
        MenuPermission.REPORTS,
        MenuPermission.SETTINGS,
        MenuPermission.LOCATIONS,
        MenuPermission.LOG_ACTIVITY,
        MenuPermission.MAIL,
        MenuPermission.DATA_MASTER,
        MenuPermission.COMPLAINTS,
    ],
    UserRole.HELPDESK: [
        MenuPermission.DASHBOARD,
        MenuPermission.REPORTS,
        MenuPermission.MAIL,
        MenuPermission.COMPLAINTS,
    ],
    UserRole.CASH_MANAGEMENT: [MenuPermission.DASHBOARD, MenuPermission.MAIL],
    UserRole.TECHNICIAN: [MenuPermission.DASHBOARD, MenuPermission.MAIL],
}


@unique
class ComplaintStatus(str, Enum):
    """Complaint lifecycle. Any status may move to any other."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN PROGRESS"
    HOLD = "HOLD"
    CLOSED = "CLOSED"


@unique
class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@unique
class Pengecekan(str, Enum):
    """Outcome of the complaint validation check."""

    VALID = "VALID"
    TIDAK_VALID = "TIDAK VALID"


@unique
class ActivityAction(str, Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VIEW = "VIEW"
    IMPORT = "IMPORT"
    EXPORT = "EXPORT"


@unique
class MasterDataType(str, Enum):
    """Reference tables managed from the Data Master menu."""

    CATEGORY = "CATEGORY"
    COMPLAINT_CATEGORY = "COMPLAINT_CATEGORY"
    INFO = "INFO"
    BANK = "BANK"


# Location vendor codes
FLM_VENDORS = ("ADVANTAGE", "BRINKS-AMS", "BRINKS-ICS", "KEJAR")
SLM_VENDORS = ("DN", "DATINDO")
PENEMPATAN_OPTIONS = ("INDOMARET", "ALFAMART", "ALFAMIDI")

COMPLAINT_TARGET = "Data Aduan"
LOCATION_TARGET = "Data Lokasi"
SETTINGS_TARGET = "System Settings"
