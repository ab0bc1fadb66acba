# storefront/core/supabase_client.py
from supabase import acreate_client, AsyncClient

from storefront.core.config import get_settings

settings = get_settings()


async def create_supabase_client() -> AsyncClient:
    """
    Create an async Supabase client with the anon/public key.

    Use cases:
      - reading/writing the signed-in user's wishlist rows
      - Supabase Auth session lookups (sign in, sign out, get_user)

    Note: This client respects RLS; the storefront never holds a
    service role key.
    """
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
