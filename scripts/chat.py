#!/usr/bin/env python
"""Talk to the spending assistant from the terminal.

Usage:
    python -m scripts.chat
    python -m scripts.chat --analyze
"""

import argparse
import asyncio

from walletwise.assistant.service import SUGGESTIONS, ChatSession, FinanceAssistant
from walletwise.config import get_settings
from walletwise.exceptions import LLMError, StoreError
from walletwise.llm.client import OpenAICompatibleClient
from walletwise.logging_config import setup_logging
from walletwise.transactions.store import SupabaseTransactionStore

EXIT_WORDS = {"exit", "quit"}


async def run_chat(analyze: bool, log_level: str) -> None:
    """Run an interactive session, or print a one-shot analysis."""
    settings = get_settings()
    setup_logging(level=log_level)

    store = SupabaseTransactionStore(settings=settings.store)
    llm_client = OpenAICompatibleClient(settings=settings.llm)
    assistant = FinanceAssistant(llm_client=llm_client, store=store, settings=settings.llm)

    try:
        if analyze:
            try:
                transactions = await store.get_transactions()
                print(await assistant.analyze_transactions(transactions))
            except (StoreError, LLMError) as e:
                print(f"Analysis failed: {e.message}")
            return

        session = ChatSession(assistant)
        await session.refresh()

        print(session.messages[0].content)
        print("Try asking:")
        for suggestion in SUGGESTIONS:
            print(f"  - {suggestion}")

        while True:
            text = await asyncio.to_thread(input, "\n> ")
            if text.strip().lower() in EXIT_WORDS:
                break
            reply = await session.send(text)
            if reply is not None:
                print(reply.content)
    finally:
        await llm_client.close()
        await store.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Chat with the WalletWise assistant",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Print an insight report over recent transactions and exit",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level")

    args = parser.parse_args()

    try:
        asyncio.run(run_chat(args.analyze, args.log_level))
    except (EOFError, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
