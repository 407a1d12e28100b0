"""
SecretStore — Encrypted secrets attached to applications.

Provides the public API for secret handling:
- ``create(data, ctx)`` — encrypt a plaintext value and persist it with its metadata
- ``update_value(secret_id, plaintext, ctx)`` — replace the value with a new bundle
- ``list_for_app(app_id)`` / ``get(secret_id)`` — metadata only, never the value
- ``reveal(secret_id, ctx)`` — the one path that returns plaintext
- ``delete(secret_id, ctx)`` — remove a secret

Every operation except listing appends an audit entry.

Security Note:
    Never log plaintext or bundle fields. Only log secret ids, labels,
    operations and user emails. Audit payloads are built from the
    serialized record, which excludes the bundle columns.
"""
import logging
from typing import Optional

from ..audit import AuditContext, record_audit
from ..models import SecretInput, SecretRecord
from ..storage import Storage
from .crypto import SecretCipher

logger = logging.getLogger("controle.vault")

RESOURCE_TYPE = "secret"


class SecretStore:
    """Secret persistence wrapper around a Storage and a SecretCipher.

    The plaintext value is never part of a stored record; it only exists
    as the input of ``create``/``update_value`` and the output of ``reveal``.
    """

    def __init__(self, storage: Storage, cipher: SecretCipher):
        self._storage = storage
        self._cipher = cipher

    async def list_for_app(self, app_id: str) -> list[SecretRecord]:
        """List secret metadata for one application."""
        return await self._storage.list_secrets(app_id)

    async def get(self, secret_id: str) -> Optional[SecretRecord]:
        """Return one secret record, or None if it does not exist."""
        return await self._storage.get_secret(secret_id)

    async def create(
        self, data: SecretInput, ctx: AuditContext
    ) -> SecretRecord:
        """Encrypt ``data.plain_value`` and persist it with its metadata.

        Args:
            data: Validated secret payload.
            ctx: Caller identity for the audit trail.

        Returns:
            The stored secret record.
        """
        bundle = self._cipher.encrypt(data.plain_value)
        fields = data.model_dump(mode="json", exclude={"plain_value"})
        secret = await self._storage.create_secret({
            **fields,
            **bundle.to_record(),
            "created_by": ctx.user_id,
        })
        await record_audit(
            self._storage,
            ctx.entry("create", RESOURCE_TYPE, secret.id, new_data=secret.dump()),
        )
        logger.info(
            "Secret created: id=%s label=%s by=%s",
            secret.id, secret.label, ctx.user_email,
        )
        return secret

    async def update_value(
        self, secret_id: str, plaintext: str, ctx: AuditContext
    ) -> Optional[SecretRecord]:
        """Re-encrypt a secret with a brand-new bundle.

        Returns:
            The updated record, or None if the secret does not exist.
        """
        if await self._storage.get_secret(secret_id) is None:
            return None
        bundle = self._cipher.encrypt(plaintext)
        secret = await self._storage.update_secret(secret_id, bundle.to_record())
        if secret is None:
            return None
        await record_audit(
            self._storage, ctx.entry("update", RESOURCE_TYPE, secret_id),
        )
        logger.info("Secret updated: id=%s by=%s", secret_id, ctx.user_email)
        return secret

    async def reveal(self, secret_id: str, ctx: AuditContext) -> Optional[str]:
        """Decrypt and return a secret value.

        Returns:
            The plaintext, or None if the secret does not exist.

        Raises:
            IntegrityError: The stored bundle cannot be authenticated
                (tampered, corrupted, or encrypted under another key).
        """
        secret = await self._storage.get_secret(secret_id)
        if secret is None:
            return None
        value = self._cipher.decrypt(secret.bundle())
        await record_audit(
            self._storage, ctx.entry("view", RESOURCE_TYPE, secret_id),
        )
        logger.info("Secret revealed: id=%s by=%s", secret_id, ctx.user_email)
        return value

    async def delete(self, secret_id: str, ctx: AuditContext) -> bool:
        """Remove a secret.

        Returns:
            True if the secret existed and was removed.
        """
        existing = await self._storage.get_secret(secret_id)
        if existing is None:
            return False
        deleted = await self._storage.delete_secret(secret_id)
        if deleted:
            await record_audit(
                self._storage,
                ctx.entry(
                    "delete", RESOURCE_TYPE, secret_id, old_data=existing.dump(),
                ),
            )
            logger.info("Secret deleted: id=%s by=%s", secret_id, ctx.user_email)
        return deleted
