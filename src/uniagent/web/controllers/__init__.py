"""API controllers for the web layer."""

from uniagent.web.controllers.accounts import router as accounts_router
from uniagent.web.controllers.chains import router as chains_router
from uniagent.web.controllers.transactions import router as transactions_router

__all__ = [
    "accounts_router",
    "chains_router",
    "transactions_router",
]
