import logging

logger = logging.getLogger(__name__)


class InMemoryNavigator:
    """Records route changes for a client without a real router."""

    def __init__(self, initial_route: str = "/") -> None:
        self.history: list[str] = [initial_route]

    @property
    def current_route(self) -> str:
        return self.history[-1]

    def go(self, route: str) -> None:
        logger.debug("Navigating to %s", route)
        self.history.append(route)
