"""Client context domain entity."""

from dataclasses import dataclass


@dataclass
class ClientContext:
    """An open page that the worker can control.

    Attributes:
        client_id: Identifier of the page
        url: URL the page has loaded
        controller: Cache version controlling the page, None if uncontrolled
        focused: Whether the page currently has focus
    """

    client_id: str
    url: str
    controller: str | None = None
    focused: bool = False
