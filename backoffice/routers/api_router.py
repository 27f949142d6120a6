from fastapi import APIRouter
from backoffice.routers import leave, salary_slips

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(salary_slips.router, tags=["Salary Slips"])
