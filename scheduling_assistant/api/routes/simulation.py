"""Simulation routes - drive the assistant with a simulated customer."""

from fastapi import APIRouter

from scheduling_assistant.agent.customer_simulator import CustomerSimulator
from scheduling_assistant.api.deps import LLM, DBSession, Notifier
from scheduling_assistant.schemas.chat import (
    CustomerTurn,
    CustomerTurnRequest,
    SimulationResult,
    SimulationRunRequest,
)

router = APIRouter()


@router.post("/customer-turn", response_model=CustomerTurn)
async def customer_turn(request: CustomerTurnRequest, db: DBSession, llm: LLM):
    """Get the simulated customer's next message for a transcript."""
    simulator = CustomerSimulator(db, llm)
    return await simulator.next_turn(request.messages)


@router.post("/run", response_model=SimulationResult)
async def run_simulation(request: SimulationRunRequest, db: DBSession, llm: LLM, notifier: Notifier):
    """Run a full simulated conversation, booking through the normal path."""
    simulator = CustomerSimulator(db, llm, notifier)
    return await simulator.run(request.max_turns)
