# ViewSets package
from .base import BaseViewSet
from .mobile import MobileViewSet
from .compat import CompatViewSet
from .admin import (
    AdminAuthViewSet,
    AdminDashboardViewSet,
    AdminEmployeesViewSet,
    AdminTimeLogsViewSet,
    AdminSettingsViewSet,
)

__all__ = [
    'BaseViewSet',
    'MobileViewSet',
    'CompatViewSet',
    'AdminAuthViewSet',
    'AdminDashboardViewSet',
    'AdminEmployeesViewSet',
    'AdminTimeLogsViewSet',
    'AdminSettingsViewSet',
]
