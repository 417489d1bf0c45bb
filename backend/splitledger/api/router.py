"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from splitledger.api.routes import users, events, payments, transactions

api_router = APIRouter()

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(events.router)
api_router.include_router(payments.router)
api_router.include_router(transactions.router)
