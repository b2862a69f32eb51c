import logging
import webbrowser

log = logging.getLogger(__name__)


def open_browser(url: str, browser: str = "", new_window: bool = True) -> bool:
    """
    Opens the URL in the configured browser, or the system default.

    :param url: The URL to open.
    :param browser: A `webbrowser` name ("firefox", "safari") or a command line
        containing "%s". Empty selects the system default.
    :param new_window: Ask for a new window instead of a new tab.
    :return: True if the browser reported success, False otherwise.
    """
    target = f"'{browser}'" if browser else "the default browser"
    log.info(f"Opening {url} in {target}...")
    try:
        controller = webbrowser.get(browser) if browser else webbrowser.get()
        opened = controller.open(url, new=1 if new_window else 2)
    except webbrowser.Error as e:
        log.warning(f"Could not launch {target}: {e}. Open {url} manually.")
        return False

    if not opened:
        log.warning(f"{target.capitalize()} did not report success. Open {url} manually.")
    return bool(opened)
