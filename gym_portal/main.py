import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gym_portal.core.config import settings

from gym_portal.api.routes import (
    auth,
    clients,
    maintenance_fees,
    measurements,
    payments,
    plans,
    statistics,
    whatsapp,
)

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title="Gym Membership Portal")

# ===============================
# CORS CONFIGURATION
# ===============================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===============================
# INCLUDE ROUTERS
# ===============================
app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(payments.router)
app.include_router(maintenance_fees.router)
app.include_router(measurements.router)
app.include_router(plans.router)
app.include_router(statistics.router)
app.include_router(whatsapp.router)

# ===============================
# ROOT ENDPOINT
# ===============================
@app.get("/")
def root():
    return {"status": "Portal running successfully"}
