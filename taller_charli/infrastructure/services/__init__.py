"""Adaptadores de servicios externos (proveedor de identidad)."""

from .fake_identity import FakeIdentityProvider
from .supabase_identity import SupabaseIdentityProvider, build_http_client

__all__ = ["FakeIdentityProvider", "SupabaseIdentityProvider", "build_http_client"]
