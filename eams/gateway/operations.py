"""
Edge operation catalog: every business endpoint the gateway exposes, the
command it dispatches and the roles it accepts. An empty role set accepts any
authenticated caller; public paths skip authentication entirely.
"""

from ..identity.guards import EdgeOperation
from ..identity.users import UserRole
from ..rpc.protocol import Command

REGISTER = EdgeOperation("auth.register", Command.AUTH_REGISTER)
LOGIN = EdgeOperation("auth.login", Command.AUTH_LOGIN)

LIST_ABSENCES = EdgeOperation("absences.list", Command.ABSENCE_LIST)
CREATE_ABSENCE = EdgeOperation(
    "absences.create", Command.ABSENCE_CREATE, frozenset({UserRole.EMPLOYEE})
)
APPROVE_ABSENCE = EdgeOperation(
    "absences.approve", Command.ABSENCE_APPROVE, frozenset({UserRole.ADMIN})
)
REJECT_ABSENCE = EdgeOperation(
    "absences.reject", Command.ABSENCE_REJECT, frozenset({UserRole.ADMIN})
)

ALL_OPERATIONS = (
    REGISTER,
    LOGIN,
    LIST_ABSENCES,
    CREATE_ABSENCE,
    APPROVE_ABSENCE,
    REJECT_ABSENCE,
)
