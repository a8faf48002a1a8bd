from fastapi import APIRouter
from scheduling_assistant.api.routes import slots, appointments, providers, chat, simulation

api_router = APIRouter()

api_router.include_router(slots.router, prefix="/slots", tags=["Slots"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(providers.router, prefix="/providers", tags=["Providers"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
api_router.include_router(simulation.router, prefix="/simulation", tags=["Simulation"])
