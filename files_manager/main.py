import asyncio
import signal
from typing import Any

from loguru import logger

from files_manager.composition import create_app_dependencies
from files_manager.core import SERVICE_NAME


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


async def run() -> None:
    _log("app_starting")
    deps = create_app_dependencies()
    deps.start()
    try:
        ready = await deps.wait_ready()
        stats = await deps.stats()
        _log("app_ready", **ready, **stats)

        shutdown = asyncio.Event()

        def request_shutdown() -> None:
            if not shutdown.is_set():
                _log("shutdown_signal")
                shutdown.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, request_shutdown)
            except NotImplementedError:
                pass

        await shutdown.wait()
    finally:
        _log("app_stopping")
        await deps.close()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        _log("app_interrupted")
    except Exception as e:
        logger.exception("app failed: {}", e)
        raise


if __name__ == "__main__":
    main()
