#!/usr/bin/env python3
"""
Groq Completion Runner

Sends one prompt through the load-balanced Groq client.

Usage:
    export GROQ_API_KEY=gsk_...
    export GROQ_API_KEY_2=gsk_...   # optional extra keys

    python scripts/complete.py "Write a limerick about PDFs"
    python scripts/complete.py "Explain OCR" --system "Answer in one paragraph" --stream
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def run_completion(prompt: str, system: str = None, stream: bool = False) -> int:
    from src.integrations import ExternalAPIClients, GroqError

    async with ExternalAPIClients() as clients:
        try:
            if stream:
                async with clients.groq.stream_complete(prompt, system_prompt=system) as fragments:
                    async for fragment in fragments:
                        print(fragment, end="", flush=True)
                print()
            else:
                print(await clients.groq.complete(prompt, system_prompt=system))
        except GroqError as e:
            logger.error(f"Completion failed: {e}")
            return 1
        finally:
            logger.info(f"Key pool: {clients.pool.stats().to_dict()}")

    return 0


def main():
    parser = argparse.ArgumentParser(description="Run a Groq completion")
    parser.add_argument("prompt", help="User prompt")
    parser.add_argument("--system", default=None, help="System prompt")
    parser.add_argument("--stream", action="store_true", help="Stream the response")

    args = parser.parse_args()

    load_dotenv()

    sys.exit(asyncio.run(run_completion(args.prompt, args.system, args.stream)))


if __name__ == "__main__":
    main()
