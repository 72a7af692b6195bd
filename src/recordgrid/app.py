import sys
import tkinter as tk
from tkinter import filedialog

from .data.session import GridSession
from .services.export_service import load_csv
from .settings import EngineSettings, SessionOptions
from .utils.debug_trace import get_logger, setup_debug_logging
from .views.grid.window import GridWindow

logger = get_logger(__name__)


def get_version():
    """Get version from package metadata."""
    try:
        from importlib.metadata import version

        return version("recordgrid")
    except Exception:
        return "Development"


def run_session(
    records,
    columns,
    options: SessionOptions | None = None,
    host=None,
    registry=None,
    settings: EngineSettings | None = None,
    parent: tk.Misc | None = None,
):
    """Show the grid modally and return the session result.

    Args:
        records: Records to display (mutated in place by edits)
        columns: Column names in display order
        options: Per-session options
        host: RecordHost used to commit edits, or None for in-memory editing
        registry: HandlerRegistry for commits (defaults to the built-in handlers)
        settings: Engine limits and colors
        parent: Existing Tk widget to attach to; a hidden root is created if None

    Returns:
        Selected records, touched records after a commit, a single
        {"__SEARCH_TEXT__": text} record, or an empty list when cancelled
    """
    owns_root = parent is None
    root = tk.Tk() if owns_root else parent
    if owns_root:
        root.withdraw()

    session = GridSession(
        records,
        columns,
        options=options,
        host=host,
        registry=registry,
        settings=settings,
        scheduler=root,
    )
    window = GridWindow(root, session)
    window.grab_set()
    root.wait_window(window)

    if owns_root:
        root.destroy()

    if session.last_commit is not None:
        logger.info(session.last_commit.summary())
    return session.result


def _records_from_argv(argv):
    if len(argv) > 1:
        return load_csv(argv[1])

    root = tk.Tk()
    root.withdraw()
    path = filedialog.askopenfilename(
        parent=root,
        title="Open CSV",
        filetypes=[("CSV Files", "*.csv"), ("All Files", "*.*")],
    )
    root.destroy()
    if not path:
        return None
    return load_csv(path)


def main() -> None:
    """Entry point: browse a CSV file in the grid and print the result."""
    loaded = _records_from_argv(sys.argv)
    if loaded is None:
        return

    records, columns = loaded
    options = SessionOptions(title=f"recordgrid {get_version()}", allow_create_from_search=True)
    for record in run_session(records, columns, options):
        print(record)


def main_debug() -> None:
    """Entry point with console debug logging enabled."""
    setup_debug_logging(debug=True)
    main()


if __name__ == "__main__":
    main()
