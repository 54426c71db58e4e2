import logging

from textual.logging import TextualHandler


def setup_logging(debug: bool = False, tui: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    if root.handlers:
        return

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    # a dashboard owns the terminal; records go through Textual while it runs
    ch = TextualHandler() if tui else logging.StreamHandler()
    ch.setFormatter(fmt)
    root.addHandler(ch)
