from .enrollments import router as enrollments_router
from .payments import router as payments_router
from .webhook import router as webhook_router

routes = [
    payments_router,
    webhook_router,
    enrollments_router,
]
