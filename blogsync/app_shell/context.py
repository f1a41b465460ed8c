from __future__ import annotations

from dataclasses import dataclass

import httpx

from blogsync.adapters.credential_store import JsonFileCredentialStore
from blogsync.adapters.http_gateway import ApiGateway
from blogsync.adapters.navigation import InMemoryNavigator
from blogsync.components.admin import AdminConsole
from blogsync.components.engagement import EngagementTracker
from blogsync.components.resources import ResourceStore
from blogsync.components.session import SessionManager
from blogsync.ports.navigation import NavigatorPort
from blogsync.ports.storage import CredentialStorePort
from blogsync.rules.models import ClientRules


@dataclass
class ClientContext:
    gateway: ApiGateway
    session: SessionManager
    resources: ResourceStore
    engagement: EngagementTracker
    admin: AdminConsole
    store: CredentialStorePort
    navigator: NavigatorPort
    rules: ClientRules

    @classmethod
    def create(
        cls,
        rules: ClientRules,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        store: CredentialStorePort | None = None,
        navigator: NavigatorPort | None = None,
    ) -> ClientContext:
        # Adapters
        store = store or JsonFileCredentialStore(rules.storage.credential_path)
        navigator = navigator or InMemoryNavigator(rules.routes.home)
        gateway = ApiGateway(
            rules.api.base_url,
            store,
            navigator,
            login_route=rules.routes.login,
            timeout=rules.api.timeout_seconds,
            transport=transport,
        )

        # Components
        session = SessionManager(
            gateway, store, password_min_length=rules.validation.password_min_length
        )
        resources = ResourceStore(
            gateway, session, default_limit=rules.pagination.default_limit
        )
        engagement = EngagementTracker(
            gateway, session, comment_max_length=rules.validation.comment_max_length
        )
        admin = AdminConsole(
            gateway, session, resources, default_limit=rules.pagination.default_limit
        )

        # Owned posts, reactions and admin views belong to one user; drop them
        # when the user changes.
        last_user_id: list[str | None] = [None]

        def on_session_change() -> None:
            user_id = session.user.id if session.user else None
            if user_id != last_user_id[0]:
                last_user_id[0] = user_id
                resources.forget_owned()
                engagement.discard()
                admin.discard()

        session.subscribe(on_session_change)

        return cls(
            gateway=gateway,
            session=session,
            resources=resources,
            engagement=engagement,
            admin=admin,
            store=store,
            navigator=navigator,
            rules=rules,
        )

    async def aclose(self) -> None:
        await self.gateway.aclose()
