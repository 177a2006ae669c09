"""Example configuration plugin doing asynchronous work before writing."""

import asyncio


async def load(store):
    await asyncio.sleep(0.01)
    store.set("plugin-async", {"loaded": True})
    return "plugin-async"
