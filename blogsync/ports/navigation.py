from typing import Protocol


class NavigatorPort(Protocol):
    def go(self, route: str) -> None:
        """Switch the client to the given route."""
        ...
