"""Protean Engine runner for the marketplace domain.

Needed when ``event_processing`` is ``async`` (the production overlay):
the Engine consumes the identity event stream and dispatches
``AccountRemoved`` to the marketplace's event handler.

Usage:
    python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    from marketplace.domain import marketplace
    from marketplace.utils.logging import configure_logging

    configure_logging()
    marketplace.init()
    return marketplace


async def run():
    engine = Engine(_get_domain())
    await engine.run()


def main():
    argparse.ArgumentParser(description="Market Orders Engine runner").parse_args()
    asyncio.run(run())


if __name__ == "__main__":
    main()
