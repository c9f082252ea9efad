import asyncio

from smtp_module.logger import configure_logging
from smtp_module.module import run_module
from smtp_module.settings import load_settings


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(str(settings["log_level"]))
    asyncio.run(run_module(settings))
