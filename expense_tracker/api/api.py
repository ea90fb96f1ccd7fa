from fastapi import APIRouter

from expense_tracker.api.routes import auth, categories, expenses, users

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(expenses.router)
