# This file makes the routers directory a Python package
from . import (
    contact,
    dashboard,
    downloads,
    health,
    programs,
    resources,
)
