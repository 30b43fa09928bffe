"""
Every business route at the edge must run the guard chain.
"""

import pytest
from fastapi.routing import APIRoute

from eams.gateway import operations as ops
from eams.gateway.app import create_gateway_app
from eams.gateway.routes import router
from eams.identity.users import UserRole
from eams.rpc.protocol import Command

pytestmark = pytest.mark.unit


def _guarded_operation(route: APIRoute):
    for dep in route.dependant.dependencies:
        operation = getattr(dep.call, "_operation", None)
        if operation is not None:
            return operation
    return None


def _business_routes():
    return [r for r in router.routes if isinstance(r, APIRoute)]


def test_every_business_route_is_guarded():
    routes = _business_routes()

    assert routes
    for route in routes:
        assert _guarded_operation(route) is not None, route.path


@pytest.mark.parametrize(
    "method,path,operation",
    [
        ("POST", "/auth/register", ops.REGISTER),
        ("POST", "/auth/login", ops.LOGIN),
        ("GET", "/absences", ops.LIST_ABSENCES),
        ("POST", "/absences", ops.CREATE_ABSENCE),
        ("PATCH", "/absences/{absence_id}/approve", ops.APPROVE_ABSENCE),
        ("PATCH", "/absences/{absence_id}/reject", ops.REJECT_ABSENCE),
    ],
)
def test_route_declares_its_operation(method, path, operation):
    route = next(
        r for r in _business_routes() if r.path == path and method in r.methods
    )

    assert _guarded_operation(route) is operation


def test_operation_catalog():
    assert ops.CREATE_ABSENCE.roles == frozenset({UserRole.EMPLOYEE})
    assert ops.APPROVE_ABSENCE.roles == frozenset({UserRole.ADMIN})
    assert ops.REJECT_ABSENCE.roles == frozenset({UserRole.ADMIN})
    assert ops.LIST_ABSENCES.roles == frozenset()
    assert {op.command for op in ops.ALL_OPERATIONS} == set(Command)


def test_healthz_is_the_only_route_outside_the_guarded_router():
    app = create_gateway_app()

    own = [r.path for r in app.router.routes if isinstance(r, APIRoute)]
    business = {r.path for r in _business_routes()}

    assert "/healthz" not in business
    assert [p for p in own if p not in business] == ["/healthz"]
