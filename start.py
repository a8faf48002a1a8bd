"""Entry point for the Scheduling Assistant API, seeder and customer simulation."""

import argparse
import asyncio
import os
import signal
import subprocess
import sys
from pathlib import Path

# Load .env file FIRST, before settings are imported anywhere
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)
print(f"✅ Loaded environment from: {env_path}")


def serve(host: str, port: int, reload: bool):
    print("=" * 50)
    print("Starting Scheduling Assistant API")
    print("=" * 50)
    print(f"- API: http://{host}:{port}")
    print(f"- API Docs: http://{host}:{port}/docs")
    print()

    command = [sys.executable, "-m", "uvicorn", "scheduling_assistant.main:app", "--host", host, "--port", str(port)]
    if reload:
        command.append("--reload")

    process = subprocess.Popen(command, cwd=os.path.dirname(os.path.abspath(__file__)), env=os.environ.copy())
    try:
        process.wait()
    except KeyboardInterrupt:
        print()
        print("Shutting down...")
        process.terminate()
        process.wait()
        print("Service stopped.")


def seed():
    from scheduling_assistant.seed import main as seed_main

    asyncio.run(seed_main())


async def simulate(max_turns: int | None):
    from scheduling_assistant.agent.customer_simulator import CustomerSimulator
    from scheduling_assistant.agent.llm import get_llm_client
    from scheduling_assistant.database import close_db, get_sessionmaker, init_db
    from scheduling_assistant.services.notification_service import NotificationService

    await init_db()
    try:
        async with get_sessionmaker()() as session:
            simulator = CustomerSimulator(session, get_llm_client(), NotificationService())

            # Ctrl+C finishes the current turn, then stops the loop
            loop = asyncio.get_running_loop()
            loop.add_signal_handler(signal.SIGINT, simulator.stop)
            loop.add_signal_handler(signal.SIGTERM, simulator.stop)

            result = await simulator.run(max_turns)
    finally:
        await close_db()

    for message in result.transcript:
        print(f"{message.role.capitalize()}: {message.content}")
        for slot in message.slots or []:
            print(f"    - {slot.date} {slot.time} ({slot.provider_name}, slot {slot.slot_id})")
    print()
    status = "stopped" if result.stopped else "completed" if result.completed else "ran out of turns"
    print(f"Simulation {status} after {result.turns} turns")
    if result.appointment_id is not None:
        print(f"✅ Booked appointment {result.appointment_id}")


def main():
    parser = argparse.ArgumentParser(description="Scheduling Assistant")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the FastAPI server (default)")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--no-reload", action="store_true")

    subparsers.add_parser("seed", help="Reset the database with sample slots")

    simulate_parser = subparsers.add_parser("simulate", help="Run the simulated customer once")
    simulate_parser.add_argument("--max-turns", type=int, default=None)

    args = parser.parse_args()

    if args.command == "seed":
        seed()
    elif args.command == "simulate":
        try:
            asyncio.run(simulate(args.max_turns))
        except Exception as e:
            print(f"❌ Simulation failed: {e}")
            sys.exit(1)
    elif args.command == "serve":
        serve(args.host, args.port, not args.no_reload)
    else:
        serve("0.0.0.0", 8000, True)


if __name__ == "__main__":
    main()
