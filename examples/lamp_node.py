"""
lamp_node.py — Minimal demokit node example.

Turns a (virtual) lamp on when any other node broadcasts LIGHT_ON, keeps it
on for a few seconds, then announces LIGHT_OFF to the installation.

Usage:
    export DEMOKIT_NODE_NAME=lamp
    export DEMOKIT_TRANSPORT_BACKEND=redis
    export DEMOKIT_REDIS_HOST=localhost
    python examples/lamp_node.py
"""

from demokit import Action, chain, configure_logging, create_default_node


async def main() -> None:
    configure_logging()
    node = create_default_node()
    state = {"lamp": "off"}
    node.serve_state(state)

    def turn_on(event) -> None:
        state["lamp"] = "on"

    def turn_off(event) -> None:
        state["lamp"] = "off"

    async def announce(event) -> None:
        await node.broadcast_event("LIGHT_OFF", '{"by": "%s"}' % node.name)

    node.on_event_do(
        "LIGHT_ON",
        chain(
            Action("turnOn", operation=turn_on, guard=lambda e: state["lamp"] == "off"),
            Action("turnOff", operation=turn_off, delay_s=3.0),
            Action("announce", operation=announce),
        ),
    )
    node.set_entry_point(Action("hello", operation=lambda e: print(f"{node.name} ready")))

    await node.run()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
