"""
Client service for business logic operations.
"""

from typing import Optional
from uuid import uuid4
import structlog

from config import get_supabase_client
from models.client import (
    ClientContact,
    ClientCreate,
    ClientUpdate,
    ClientResponse,
)
from exceptions import (
    ClientNotFoundError,
    InvalidContactError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


def normalize_contacts(contacts: list[ClientContact]) -> list[dict]:
    """
    Validate contacts and give each one an id.

    Raises:
        InvalidContactError: If a contact lacks name or phone
    """
    normalized = []
    for contact in contacts:
        missing = [f for f in ("name", "phone") if not getattr(contact, f)]
        if missing:
            raise InvalidContactError(missing)
        data = contact.model_dump()
        data["id"] = contact.id or uuid4().hex[:9]
        normalized.append(data)
    return normalized


class ClientService:
    """
    Client business logic.

    Handles CRUD operations for clients.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "clients"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        segment: Optional[str] = None,
    ) -> tuple[list[ClientResponse], int]:
        """
        Get clients with optional filters.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            search: Substring of name, business name or document
            segment: Exact segment

        Returns:
            Tuple of (clients list, total count)
        """
        logger.info(
            "getting_clients",
            page=page,
            page_size=page_size,
            search=search,
            segment=segment
        )

        try:
            query = self.db.table(self.table).select("*", count="exact")

            if search:
                query = query.or_(
                    f"name.ilike.%{search}%,"
                    f"business_name.ilike.%{search}%,"
                    f"document.ilike.%{search}%"
                )
            if segment:
                query = query.eq("segment", segment)

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)
            query = query.order("name")

            result = query.execute()

            clients = [ClientResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info("clients_retrieved", count=len(clients), total=total)
            return clients, total

        except Exception as e:
            logger.error("get_clients_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, client_id: str) -> ClientResponse:
        """
        Get a single client by ID.

        Raises:
            ClientNotFoundError: If client doesn't exist
        """
        logger.debug("getting_client", client_id=client_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", client_id)
                .execute()
            )

            if not result.data:
                raise ClientNotFoundError(client_id)

            return ClientResponse(**result.data[0])

        except ClientNotFoundError:
            raise
        except Exception as e:
            logger.error("get_client_failed", client_id=client_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_segments(self) -> list[str]:
        """Distinct non-empty segments, sorted."""
        try:
            result = self.db.table(self.table).select("segment").execute()
            return sorted({row["segment"] for row in result.data if row.get("segment")})
        except Exception as e:
            logger.error("get_segments_failed", error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ClientCreate) -> ClientResponse:
        """
        Create a new client.

        Raises:
            InvalidContactError: If a contact lacks name or phone
        """
        logger.info("creating_client", document=data.document)

        insert_data = data.model_dump(mode="json")
        insert_data["contacts"] = normalize_contacts(data.contacts)

        try:
            result = self.db.table(self.table).insert(insert_data).execute()
            client = ClientResponse(**result.data[0])
        except Exception as e:
            logger.error("create_client_failed", document=data.document, error=str(e))
            raise DatabaseError("insert", str(e))

        logger.info("client_created", client_id=client.id)
        return client

    def update(self, client_id: str, data: ClientUpdate) -> ClientResponse:
        """
        Update an existing client.

        Only provided fields are updated. A provided contact list
        replaces the stored one.

        Raises:
            ClientNotFoundError: If client doesn't exist
            InvalidContactError: If a contact lacks name or phone
        """
        logger.info("updating_client", client_id=client_id)

        existing = self.get_by_id(client_id)

        update_data = data.model_dump(mode="json", exclude_unset=True)
        if data.contacts is not None:
            update_data["contacts"] = normalize_contacts(data.contacts)

        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", client_id)
                .execute()
            )
            client = ClientResponse(**result.data[0])
        except Exception as e:
            logger.error("update_client_failed", client_id=client_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info("client_updated", client_id=client_id, fields=list(update_data.keys()))
        return client

    def delete(self, client_id: str) -> bool:
        """
        Delete a client.

        Raises:
            ClientNotFoundError: If client doesn't exist
        """
        logger.info("deleting_client", client_id=client_id)

        self.get_by_id(client_id)

        try:
            self.db.table(self.table).delete().eq("id", client_id).execute()
        except Exception as e:
            logger.error("delete_client_failed", client_id=client_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("client_deleted", client_id=client_id)
        return True

    def count(self) -> int:
        """Count registered clients."""
        try:
            result = self.db.table(self.table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_clients_failed", error=str(e))
            raise DatabaseError("count", str(e))


# Singleton instance for convenience
_client_service: Optional[ClientService] = None

def get_client_service() -> ClientService:
    """Get or create ClientService instance."""
    global _client_service
    if _client_service is None:
        _client_service = ClientService()
    return _client_service
