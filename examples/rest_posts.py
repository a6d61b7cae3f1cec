#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from pydantic import BaseModel

from laakhay.pulse import API, Endpoint, Paginator, RequestExecutor

PLACEHOLDER = API("https://jsonplaceholder.typicode.com")


class Post(BaseModel):
    id: int
    userId: int
    title: str


def post(post_id: int) -> Endpoint:
    return Endpoint(PLACEHOLDER, f"/posts/{post_id}")


def posts() -> Endpoint:
    return Endpoint(PLACEHOLDER, "/posts")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch posts from JSONPlaceholder")
    p.add_argument("post_id", nargs="?", type=int, default=1)
    p.add_argument("page_size", nargs="?", type=int, default=5)
    return p.parse_args()


async def main() -> None:
    args = parse_args()

    async with RequestExecutor() as executor:
        single = await executor.execute(post(args.post_id), Post)
        print("=" * 65)
        print(f"Post {single.id} by user {single.userId}: {single.title}")
        print("=" * 65)

        # JSONPlaceholder ignores limit/offset, so this prints the first page only.
        pages = Paginator(executor, posts(), Post, limit=args.page_size)
        for p in (await pages.load())[: args.page_size]:
            print(f"{p.id:>4} | {p.title}")


if __name__ == "__main__":
    asyncio.run(main())
