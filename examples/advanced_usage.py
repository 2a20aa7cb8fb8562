#!/usr/bin/env python3
"""
Advanced usage examples for ZN-Vault Python SDK
Demonstrates KMS envelope encryption, certificates, audit and error handling
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from znvault_sdk import (
    AuditFilter,
    CertificatePurpose,
    NotFoundError,
    RateLimitError,
    SecretType,
    ZnVaultClient,
    ZnVaultError,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def envelope_encryption_example(client: ZnVaultClient):
    """Encrypt locally with a data key wrapped by a KMS key"""
    logger.info("=== Envelope Encryption Example ===")

    key = await client.kms.create_key(alias="alias/example-data", description="Example key")
    logger.info(f"Created KMS key {key.key_id}")

    data_key = await client.kms.generate_data_key(key.key_id)
    logger.info(f"Wrapped data key: {data_key.encrypted_key[:16]}...")

    # Later: unwrap the stored key to decrypt data
    plaintext_key = await client.kms.decrypt_data_key(data_key.encrypted_key, key.key_id)
    logger.info(f"Unwrapped {len(plaintext_key)} byte data key")

    result = await client.kms.encrypt(key.key_id, "card-number-4111", context={"app": "billing"})
    text = await client.kms.decrypt_to_string(key.key_id, result.ciphertext, context={"app": "billing"})
    logger.info(f"Round trip through KMS: {text}")

    async for existing in client.kms.list_all_keys():
        logger.info(f"  {existing.key_id} {existing.alias} {existing.state}")

async def secret_rotation_example(client: ZnVaultClient):
    """Demonstrate secret rotation and version history"""
    logger.info("=== Secret Rotation Example ===")

    secret = await client.secrets.create(
        alias="services/service-a/api-key",
        type=SecretType.CREDENTIAL,
        data={"api_key": "initial-api-key-value"},
        tags=["api-key", "auto-rotate"],
    )
    rotated = await client.secrets.rotate(secret.id, {"api_key": "rotated-api-key-value"})
    logger.info(f"Rotated secret to version {rotated.version}")

    history = await client.secrets.get_history(secret.id)
    logger.info(f"Secret has {len(history)} previous versions")
    if history:
        rolled_back = await client.secrets.rollback(secret.id, history[0].version)
        logger.info(f"Rolled back, now at version {rolled_back.version}")

async def certificate_example(client: ZnVaultClient, pem_path: Path):
    """Store a PEM certificate and find expiring ones"""
    logger.info("=== Certificate Example ===")

    certificate = await client.certificates.store_pem(
        client_id="B12345678",
        kind="CUSTOM",
        alias="example",
        pem_data=pem_path.read_bytes(),
        purpose=CertificatePurpose.TLS,
    )
    logger.info(f"Stored {certificate.subject_cn}, expires {certificate.not_after:%Y-%m-%d}")

    for expiring in await client.certificates.list_expiring(days=30):
        logger.info(f"  expiring soon: {expiring.client_id}/{expiring.kind}/{expiring.alias}")

async def audit_and_compliance_example(client: ZnVaultClient):
    """Demonstrate audit queries and hash chain verification"""
    logger.info("=== Audit and Compliance Example ===")

    end_time = datetime.now(timezone.utc)
    audit_filter = AuditFilter(start_date=end_time - timedelta(hours=24), end_date=end_time, limit=50)
    page = await client.audit.list(audit_filter)
    logger.info(f"Found {page.total} audit entries in last 24 hours")

    # Analyze entries by action
    actions = {}
    for entry in page.items:
        actions[entry.action] = actions.get(entry.action, 0) + 1
    for action, count in actions.items():
        logger.info(f"  {action}: {count}")

    verification = await client.audit.verify()
    logger.info(f"Audit chain valid: {verification.valid} ({verification.entries_verified} entries)")

async def error_handling_example(client: ZnVaultClient):
    """Demonstrate typed errors and opt-in token refresh"""
    logger.info("=== Error Handling Example ===")

    try:
        await client.secrets.get("non-existent-secret")
    except NotFoundError as e:
        logger.info(f"Expected error for non-existent secret: {e}")

    try:
        secret = await client.auth.with_refresh(
            lambda: client.secrets.get_by_alias("database/production/password")
        )
        logger.info(f"Fetched {secret.alias} (refreshing the token if needed)")
    except RateLimitError as e:
        logger.warning(f"Rate limited, retry after {e.retry_after} seconds")
    except ZnVaultError as e:
        logger.error(f"Request failed: {e}")

async def main():
    """Run all examples"""
    async with ZnVaultClient.from_env() as client:
        if not await client.health.wait_for_healthy(timeout=30):
            logger.error("ZN-Vault is not healthy")
            return
        if not client.auth.is_authenticated:
            await client.auth.login("admin", "Admin123456#")

        examples = [
            envelope_encryption_example,
            secret_rotation_example,
            audit_and_compliance_example,
            error_handling_example,
        ]
        for example in examples:
            try:
                await example(client)
            except ZnVaultError as e:
                logger.error(f"Example {example.__name__} failed: {e}")

        pem_path = Path("example-cert.pem")
        if pem_path.exists():
            await certificate_example(client, pem_path)

if __name__ == "__main__":
    asyncio.run(main())
