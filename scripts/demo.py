#!/usr/bin/env python3
"""
Demo script for the offline cache worker.

This script runs the worker against an in-memory backend and a simulated
upstream, then walks through install, cached serving, the offline
fallback and the dynamic partition bound.
"""

import asyncio
import json

import httpx

from offline_cache import CacheConfig, OfflineWorker, PartitionKind, ResourceRequest
from offline_cache.entities import FetchEvent, PushEvent
from offline_cache.repositories import (
    HttpxNetworkFetcher,
    InMemoryClientRegistry,
    InMemoryNotificationCenter,
    MemoryCacheRepository,
)

BASE_URL = "http://localhost:8080/"


class Upstream:
    """Simulated network that can be switched off."""

    def __init__(self, config: CacheConfig) -> None:
        self.online = True
        self.pages = {config.resolve(asset): f"<{asset}>" for asset in config.core_assets + config.optional_assets}
        self.pages["https://api.exchangerate.host/latest"] = json.dumps({"EUR": 0.92, "GBP": 0.79})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("Network is unreachable", request=request)
        body = self.pages.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=body)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def serve(worker: OfflineWorker, url: str, accept: str = "*/*") -> None:
    response = await worker.dispatch(FetchEvent(ResourceRequest(url, headers={"accept": accept})))
    strategy = worker.classifier.classify(ResourceRequest(url)).value
    print(f"  {url}")
    print(f"    Strategy: {strategy}, Status: {response.status}, Body: {response.body[:60]!r}")


async def demo_install(worker: OfflineWorker) -> None:
    """Demonstrate install and activation."""
    print_section("Install and Activate")

    active = await worker.start()
    print(f"\n  Worker active: {active} (state: {worker.state.value})")

    print("\n  Partitions:")
    for name, count in (await worker.cache_store.stats()).items():
        print(f"    {name}: {count} entries")


async def demo_strategies(worker: OfflineWorker) -> None:
    """Demonstrate each caching strategy while online."""
    print_section("Serving Online")

    await serve(worker, BASE_URL + "style.css")
    await serve(worker, BASE_URL + "api/units.json")
    await serve(worker, "https://api.exchangerate.host/latest")
    await worker.executor.wait_for_background()


async def demo_offline(worker: OfflineWorker, upstream: Upstream) -> None:
    """Demonstrate the offline fallback."""
    print_section("Serving Offline")

    upstream.online = False
    await serve(worker, BASE_URL + "style.css")
    await serve(worker, "https://api.exchangerate.host/latest")
    await serve(worker, BASE_URL + "converter/length", accept="text/html")
    await serve(worker, "https://cdn.example.com/flags/eu.png")
    await serve(worker, "https://api.example.com/history")
    await worker.executor.wait_for_background()
    upstream.online = True


async def demo_dynamic_bound(worker: OfflineWorker, upstream: Upstream) -> None:
    """Demonstrate the dynamic partition size bound."""
    print_section("Dynamic Partition Bound")

    for i in range(8):
        url = f"https://api.example.com/rates/{i}"
        upstream.pages[url] = json.dumps({"page": i})
        await worker.dispatch(FetchEvent(ResourceRequest(url)))

    keys = await worker.cache_store.list_entries(PartitionKind.DYNAMIC)
    print(f"\n  Max items: {worker.config.max_dynamic_items}, cached: {len(keys)}")
    for key in keys:
        print(f"    {key}")


async def demo_push(worker: OfflineWorker) -> None:
    """Demonstrate push notifications."""
    print_section("Push Notification")

    notification = await worker.dispatch(PushEvent(payload={"body": "Exchange rates updated"}))
    print(f"\n  Title: {notification.title}")
    print(f"  Body: {notification.body}")
    print(f"  Actions: {[action.title for action in notification.actions]}")


async def main() -> None:
    """Run all demos."""
    print("\n" + "=" * 70)
    print("  Offline Cache Demo")
    print("=" * 70)

    config = CacheConfig(base_url=BASE_URL, max_dynamic_items=5)
    upstream = Upstream(config)
    worker = OfflineWorker.create(
        config=config,
        storage=MemoryCacheRepository(),
        fetcher=HttpxNetworkFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))),
        clients=InMemoryClientRegistry(),
        notifications=InMemoryNotificationCenter(),
    )

    try:
        await demo_install(worker)
        await demo_strategies(worker)
        await demo_offline(worker, upstream)
        await demo_dynamic_bound(worker, upstream)
        await demo_push(worker)
    finally:
        await worker.shutdown()

    print("\n" + "=" * 70)
    print("  Demo completed!")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
