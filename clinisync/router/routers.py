# clinisync/router/routers.py

from fastapi import FastAPI
from clinisync.auth.auth_controller import router as auth_router
from clinisync.modules.user.user_controller import router as user_router
from clinisync.modules.dashboard.dashboard_controller import router as dashboard_router
from clinisync.modules.consultants.consultants_controller import router as consultants_router
from clinisync.modules.patients.patients_controller import router as patients_router
from clinisync.modules.treatment_plans.treatment_plans_controller import router as treatment_plans_router
from clinisync.modules.payments.payments_controller import router as payments_router
from clinisync.modules.images.images_controller import router as images_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(dashboard_router)
    app.include_router(consultants_router)
    app.include_router(patients_router)
    app.include_router(treatment_plans_router)
    app.include_router(payments_router)
    app.include_router(images_router)
