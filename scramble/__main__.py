"""Entry point: `python -m scramble`.

Delegates to the Rich console front end.
"""

from __future__ import annotations

from .core.game import TurnController
from .logging_setup import configure_logging
from .ui.console import ConsoleApp


def main() -> None:
    log = configure_logging()
    controller = TurnController.from_environment()
    log.info("app_start mode=%s", controller.settings.mode.value)
    ConsoleApp(controller).run()


if __name__ == "__main__":
    main()
