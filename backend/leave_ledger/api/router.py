from fastapi import APIRouter

from leave_ledger.api.employees import employees_router
from leave_ledger.api.leaves import leaves_router
from leave_ledger.api.notifications import notifications_router

api_router = APIRouter()
api_router.include_router(employees_router)
api_router.include_router(leaves_router)
api_router.include_router(notifications_router)
