"""
ZN-Vault Python SDK

Python SDK for the ZN-Vault secrets and key management service.
Provides secret, KMS, certificate, audit and administration APIs with
typed errors.
"""

from .client import ZnVaultClient
from .config import ZnVaultConfig
from .exceptions import (
    ZnVaultError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    RateLimitError,
    ServerError,
    HttpError,
    NetworkError,
    DecodingError,
    ConfigurationError,
    NotAuthenticatedError,
    TokenExpiredError,
)
from .models import (
    User,
    UserRole,
    LoginResponse,
    ApiKey,
    Secret,
    SecretData,
    SecretFilter,
    SecretType,
    SecretVersion,
    KmsKey,
    KeyFilter,
    KeySpec,
    KeyState,
    KeyUsage,
    EncryptResult,
    DataKeyResult,
    Certificate,
    CertificateFilter,
    CertificatePurpose,
    CertificateStatus,
    CertificateType,
    AuditEntry,
    AuditFilter,
    AuditExportFormat,
    HealthResponse,
    UserFilter,
    UserStatus,
    Tenant,
    TenantFilter,
    TenantSettings,
    TenantStatus,
    Role,
    RoleFilter,
    Policy,
    PolicyCondition,
    PolicyDocument,
    PolicyEffect,
    PolicyFilter,
    PolicyStatement,
)
from .pagination import Page, Pagination
from .policies import allow_policy, deny_policy
from .tokens import TokenStore

__version__ = "1.0.0"
__author__ = "ZN-Vault Team"

__all__ = [
    "ZnVaultClient",
    "ZnVaultConfig",
    "TokenStore",
    "Page",
    "Pagination",
    "ZnVaultError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ServerError",
    "HttpError",
    "NetworkError",
    "DecodingError",
    "ConfigurationError",
    "NotAuthenticatedError",
    "TokenExpiredError",
    "User",
    "UserRole",
    "LoginResponse",
    "ApiKey",
    "Secret",
    "SecretData",
    "SecretFilter",
    "SecretType",
    "SecretVersion",
    "KmsKey",
    "KeyFilter",
    "KeySpec",
    "KeyState",
    "KeyUsage",
    "EncryptResult",
    "DataKeyResult",
    "Certificate",
    "CertificateFilter",
    "CertificatePurpose",
    "CertificateStatus",
    "CertificateType",
    "AuditEntry",
    "AuditFilter",
    "AuditExportFormat",
    "HealthResponse",
    "UserFilter",
    "UserStatus",
    "Tenant",
    "TenantFilter",
    "TenantSettings",
    "TenantStatus",
    "Role",
    "RoleFilter",
    "Policy",
    "PolicyCondition",
    "PolicyDocument",
    "PolicyEffect",
    "PolicyFilter",
    "PolicyStatement",
    "allow_policy",
    "deny_policy",
]
