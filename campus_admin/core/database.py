"""
Document store access
Provides the Firestore async client as a FastAPI dependency
"""

from typing import AsyncGenerator, Optional

from firebase_admin import firestore_async
from google.cloud.firestore import AsyncClient

from .firebase import initialize_firebase

_client: Optional[AsyncClient] = None

def get_firestore_client() -> AsyncClient:
    """Return the shared Firestore client, creating it on first use"""
    global _client

    if _client is None:
        _client = firestore_async.client(initialize_firebase())
    return _client

async def get_db() -> AsyncGenerator[AsyncClient, None]:
    """Dependency for getting the document store client"""
    yield get_firestore_client()
