# Services: auth state, Supabase and in-memory backends.
# contacts_service and profile_service depend on core.security; import them directly.

from contactbook.services.auth_service import (
    AuthState,
    AuthStateMachine,
    AuthStatus,
    SignUpFlow,
    decide_route,
)
from contactbook.services.memory_backend import (
    InMemoryBackend,
    InMemoryStore,
)
from contactbook.services.supabase_service import SupabaseService

__all__ = [
    "AuthState",
    "AuthStateMachine",
    "AuthStatus",
    "SignUpFlow",
    "decide_route",
    "InMemoryBackend",
    "InMemoryStore",
    "SupabaseService",
]
