#!/usr/bin/env python3
"""
Walk the chat concierge through its main flows and print each bot message.
Uses the in-memory newsletter client, so nothing is sent anywhere.

Usage (from repo root):
  python scripts/run_chat_demo.py
  python scripts/run_chat_demo.py --delay 1.0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.chatbot.messages import Message
from src.chatbot.session import create_dialogue_session
from src.integrations.clients.mocks.newsletter import MockNewsletterClient


def setup_logging():
    """Log to terminal at INFO so every transition is visible."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, messages: list[Message], effects: list[dict]):
    """Print a stage header, the new transcript entries and any client effects."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    for message in messages:
        print(f"[{message.sender.value}] {message.text}")
        if message.buttons:
            print("    buttons: " + " | ".join(f"{b.label} ({b.action.value})" for b in message.buttons))
    if effects:
        print("effects: " + json.dumps(effects))
    print()


async def main(delay: float):
    setup_logging()
    newsletter = MockNewsletterClient(existing_emails=["vip@kolzo.in"])
    session = create_dialogue_session(newsletter, typing_delay_seconds=delay)

    print_stage("WELCOME", list(session.transcript), [])

    steps = [
        ("Product guidance", session.click, ("product_guidance",)),
        ("Pick women's collection", session.click, ("select_gender", "women")),
        ("Pick handbags", session.click, ("select_category", "Handbag")),
        ("View the collection", session.click, ("redirect_to_collection",)),
        ("Back to main", session.click, ("back_to_main",)),
        ("FAQ", session.click, ("faq",)),
        ("Shipping answer", session.click, ("faq_shipping",)),
        ("Newsletter", session.click, ("newsletter",)),
        ("Subscribe with email", session.click, ("newsletter_email",)),
        ("Typo in email", session.submit_text, ("jane.example.com",)),
        ("Valid email", session.submit_text, ("jane@example.com",)),
        ("Main menu", session.click, ("back_to_main",)),
        ("Track order", session.click, ("order_tracking",)),
        ("Order number", session.submit_text, ("ORD-1712345678901",)),
        ("Back to main again", session.click, ("back_to_main",)),
        ("Say hello", session.submit_text, ("hello there",)),
    ]
    for title, call, args in steps:
        messages = await call(*args)
        print_stage(title.upper(), messages, session.drain_effects())

    print_stage("FINAL CONTEXT", [], [session.context.to_dict()])
    print(f"Newsletter subscribers: {newsletter.subscribers}")
    await session.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Chat concierge demo")
    parser.add_argument("--delay", type=float, default=0.0, help="Typing delay in seconds")
    args = parser.parse_args()
    asyncio.run(main(args.delay))
