#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
from typing import Any

from laakhay.pulse import (
    API,
    AuthenticationStyle,
    Endpoint,
    JSONLinesParser,
    RequestExecutor,
    ServerSentEventsParser,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream JSON events from an HTTP endpoint")
    p.add_argument("base", help="Base address, e.g. https://stream.example.com")
    p.add_argument("path", help="Path of the streaming endpoint, e.g. /v1/events")
    p.add_argument("--format", default="sse", choices=["sse", "jsonl"])
    p.add_argument("--token", default="", help="Bearer token, if the API needs one")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    api = API(args.base)
    if args.token:
        api = api.authenticated(AuthenticationStyle.BEARER, args.token)
    endpoint = Endpoint(api, args.path, timeout=60.0)

    if args.format == "sse":
        parser = ServerSentEventsParser(dict[str, Any])
    else:
        parser = JSONLinesParser(dict[str, Any])

    async with RequestExecutor() as executor:
        async with executor.stream(endpoint, parser) as events:
            async for event in events:
                if event.is_success:
                    print(event.value)
                else:
                    print(f"error: {type(event.error).__name__}: {event.error}")


if __name__ == "__main__":
    asyncio.run(main())
