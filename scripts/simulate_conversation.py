#!/usr/bin/env python3
"""
Local conversation simulator.

Runs a scripted multi-turn dialogue through the orchestrator without
WhatsApp or webhook setup, using the configured LLM backend.

Usage:
    python scripts/simulate_conversation.py [--backend stub|openai|ollama] [--sender NUMBER]
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from infra import InfraConfig  # noqa: E402
from infra.bootstrap import InfraBootstrap  # noqa: E402

SCENARIOS = [
    ("Greeting", "Hello, I have a question about the event"),
    ("Schedule", "When does registration start?"),
    ("Location", "Where is it taking place?"),
    ("Follow-up (tests memory)", "And what happens right after that?"),
    ("Duplicate delivery", None),
    ("Contact", "Who can I contact with more questions?"),
]


async def run(backend: str, sender_id: str, delay: float) -> None:
    config = InfraConfig.from_env()
    config.llm_backend = backend  # type: ignore
    relay = InfraBootstrap(config)
    orchestrator = relay.orchestrator

    print(f"\nStarting local relay simulation ({relay!r})\n")
    print("=" * 60)

    last_message_id = None
    for i, (name, text) in enumerate(SCENARIOS, start=1):
        print(f"\n{'-' * 60}")
        print(f"Test {i}/{len(SCENARIOS)}: {name}")
        print(f"{'-' * 60}")

        if text is None:
            # Re-deliver the previous message id
            message_id, text = last_message_id, SCENARIOS[i - 2][1]
        else:
            message_id = f"sim-{int(time.time() * 1000)}-{i}"
            last_message_id = message_id

        print(f"User: {text}")
        result = await orchestrator.handle_message(sender_id, message_id, text)
        print(f"State: {result.state.value}")
        print(f"Bot: {result.reply if result.reply is not None else '(no reply)'}")

        entry = relay.store.get(sender_id)
        if entry is not None:
            print(f"History: {len(entry.history)} turns, {entry.message_count} messages")

        await asyncio.sleep(delay)

    print("\n" + "=" * 60)
    print(f"Outcomes: {orchestrator.stats()}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate a WhatsApp conversation locally")
    parser.add_argument("--backend", default="stub", choices=["stub", "openai", "ollama"])
    parser.add_argument("--sender", default="385912395365", help="Simulated sender number")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds between messages")
    args = parser.parse_args()

    asyncio.run(run(args.backend, args.sender, args.delay))


if __name__ == "__main__":
    main()
