#!/usr/bin/env python3
"""
Basic usage example for ZN-Vault Python SDK
"""

import asyncio
from znvault_sdk import SecretFilter, SecretType, ZnVaultClient

async def main():
    # Self-signed certificates are common on development servers
    async with ZnVaultClient(
        "https://localhost:8443",
        timeout=30,
        trust_self_signed=True,
    ) as client:
        await client.auth.login("admin", "Admin123456#")

        # Create a secret
        secret = await client.secrets.create(
            alias="database/production/password",
            type=SecretType.CREDENTIAL,
            data={"username": "app", "password": "super-secret-password"},
            tags=["database", "production"],
        )
        print(f"Created secret: {secret.id}")

        # Retrieve the decrypted value
        value = await client.secrets.decrypt(secret.id)
        print(f"Retrieved secret for user: {value.data['username']}")

        # List secrets
        secrets = await client.secrets.list(SecretFilter(tags=["production"]))
        print(f"Found {len(secrets)} production secrets")

        # Update secret
        updated = await client.secrets.update(
            secret.id,
            data={"username": "app", "password": "new-password"},
        )
        print(f"Updated secret to version {updated.version}")

        await client.auth.logout()

if __name__ == "__main__":
    asyncio.run(main())
