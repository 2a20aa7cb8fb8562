"""
Data models for ZN-Vault SDK.

Wire names differ between endpoints (camelCase on some, snake_case on
others); fields are snake_case in Python and carry the wire name as alias.
"""

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, JsonValue

from .dates import Timestamp


class ApiModel(BaseModel):
    """Base for server responses: unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RequestModel(BaseModel):
    """Base for request bodies."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class SuccessResponse(ApiModel):
    success: Optional[bool] = None
    message: Optional[str] = None


# Users and authentication

class UserRole(str, Enum):
    """User role enumeration."""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    USER = "user"
    SERVICE = "service"


class UserStatus(str, Enum):
    """User status enumeration."""
    ACTIVE = "active"
    DISABLED = "disabled"
    LOCKED = "locked"


class User(ApiModel):
    """User account."""

    id: str = Field(..., description="User identifier")
    username: str = Field(..., description="Login name")
    email: Optional[str] = Field(None, description="Email address")
    role: UserRole = Field(..., description="User role")
    tenant_id: Optional[str] = Field(None, alias="tenant_id", description="Owning tenant")
    totp_enabled: bool = Field(False, alias="totp_enabled", description="Whether 2FA is enabled")
    status: Optional[UserStatus] = Field(None, description="Account status")
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    updated_at: Optional[Timestamp] = Field(None, alias="updated_at")
    last_login: Optional[Timestamp] = Field(None, alias="last_login")
    permissions: Optional[List[str]] = None


class LoginRequest(RequestModel):
    username: str
    password: str
    totp_code: Optional[str] = Field(None, alias="totp_code")


class LoginResponse(ApiModel):
    """Tokens issued by login, 2FA verification and refresh."""

    access_token: str = Field("", alias="accessToken")
    refresh_token: str = Field("", alias="refreshToken")
    token_type: str = Field("Bearer", alias="tokenType")
    expires_in: int = Field(3600, alias="expiresIn", description="Access token lifetime in seconds")
    requires_2fa: bool = Field(False, alias="requires_2fa", description="Whether a TOTP code is still needed")
    temp_token: Optional[str] = Field(None, alias="temp_token", description="Token for completing 2FA login")
    user: Optional[User] = None


class TotpVerifyRequest(RequestModel):
    temp_token: str = Field(..., alias="temp_token")
    totp_code: str = Field(..., alias="totp_code")


class RefreshTokenRequest(RequestModel):
    refresh_token: str = Field(..., alias="refresh_token")


class RegisterUserRequest(RequestModel):
    username: str
    password: str
    email: Optional[str] = None


class ChangePasswordRequest(RequestModel):
    current_password: str = Field(..., alias="current_password")
    new_password: str = Field(..., alias="new_password")


class ApiKey(ApiModel):
    """API key information (never includes the key itself)."""

    id: str
    name: str
    prefix: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="user_id")
    tenant_id: Optional[str] = Field(None, alias="tenantId")
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    expires_at: Optional[Timestamp] = Field(None, alias="expires_at")
    last_used: Optional[Timestamp] = Field(None, alias="last_used")
    scope: Optional[str] = None
    permissions: Optional[List[str]] = None
    ip_allowlist: Optional[List[str]] = Field(None, alias="ipAllowlist")


class CreateApiKeyRequest(RequestModel):
    name: str
    permissions: Optional[List[str]] = None
    expires_in_days: Optional[int] = Field(None, alias="expiresInDays")
    description: Optional[str] = None
    ip_allowlist: Optional[List[str]] = Field(None, alias="ipAllowlist")


class CreateApiKeyResponse(ApiModel):
    key: str = Field(..., description="The API key; only returned once")
    api_key: Optional[ApiKey] = Field(None, alias="api_key")
    message: Optional[str] = None


class TokenVerifyResponse(ApiModel):
    valid: bool
    user_id: Optional[str] = Field(None, alias="user_id")
    username: Optional[str] = None
    expires_at: Optional[Timestamp] = Field(None, alias="expires_at")


class PasswordResetRequest(RequestModel):
    email: str


class ResetPasswordRequest(RequestModel):
    token: str = Field(..., description="Token from the reset email")
    new_password: str = Field(..., alias="new_password")


class TotpCodeRequest(RequestModel):
    """Body for enabling or disabling 2FA."""
    totp_code: str = Field(..., alias="totp_code")


class TotpSetupResponse(ApiModel):
    secret: str
    qr_code: str = Field(..., alias="qr_code", description="QR code image for authenticator apps")
    otpauth_url: Optional[str] = Field(None, alias="otpauth_url")


class TotpEnableResponse(ApiModel):
    enabled: bool
    backup_codes: Optional[List[str]] = Field(None, alias="backup_codes")


class TotpStatusResponse(ApiModel):
    enabled: bool
    last_used: Optional[Timestamp] = Field(None, alias="last_used")


# User administration

class CreateUserRequest(RequestModel):
    username: str
    password: str
    email: Optional[str] = None
    role: Optional[str] = None
    tenant_id: Optional[str] = Field(None, alias="tenant_id")


class UpdateUserRequest(RequestModel):
    email: Optional[str] = None
    tenant_id: Optional[str] = Field(None, alias="tenant_id")
    status: Optional[UserStatus] = None


class AdminResetPasswordRequest(RequestModel):
    new_password: str = Field(..., alias="new_password")


class UserFilter(BaseModel):
    """Filter for listing users."""

    tenant_id: Optional[str] = None
    status: Optional[UserStatus] = None
    role: Optional[str] = None
    limit: int = 50
    offset: int = 0


# Tenants

class TenantStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class Tenant(ApiModel):
    """Tenant organization."""

    id: str = Field(..., description="Tenant identifier")
    name: str
    description: Optional[str] = None
    status: TenantStatus = TenantStatus.ACTIVE
    max_secrets: Optional[int] = Field(None, alias="max_secrets")
    max_kms_keys: Optional[int] = Field(None, alias="max_kms_keys")
    max_certificates: Optional[int] = Field(None, alias="max_certificates")
    max_configs: Optional[int] = Field(None, alias="max_configs")
    max_storage_mb: Optional[int] = Field(None, alias="max_storage_mb")
    contact_email: Optional[str] = Field(None, alias="contact_email")
    contact_name: Optional[str] = Field(None, alias="contact_name")
    metadata: Optional[Dict[str, JsonValue]] = None
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    created_by: Optional[str] = Field(None, alias="created_by")
    updated_at: Optional[Timestamp] = Field(None, alias="updated_at")
    last_activity: Optional[Timestamp] = Field(None, alias="last_activity")


class TenantSettings(BaseModel):
    """Tenant quotas and retention; sent and received in the same shape."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    max_secrets: Optional[int] = Field(None, alias="max_secrets")
    max_kms_keys: Optional[int] = Field(None, alias="max_kms_keys")
    secret_retention_days: Optional[int] = Field(None, alias="secret_retention_days")
    audit_retention_days: Optional[int] = Field(None, alias="audit_retention_days")


class CreateTenantRequest(RequestModel):
    id: str
    name: str
    description: Optional[str] = None
    contact_email: Optional[str] = Field(None, alias="contact_email")
    contact_name: Optional[str] = Field(None, alias="contact_name")
    settings: Optional[TenantSettings] = None


class UpdateTenantRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TenantStatus] = None
    contact_email: Optional[str] = Field(None, alias="contact_email")
    contact_name: Optional[str] = Field(None, alias="contact_name")


class TenantFilter(BaseModel):
    status: Optional[TenantStatus] = None
    limit: int = 50
    offset: int = 0


class TenantStats(ApiModel):
    secret_count: int = Field(..., alias="secret_count")
    user_count: int = Field(..., alias="user_count")
    kms_key_count: int = Field(..., alias="kms_key_count")
    storage_used: Optional[int] = Field(None, alias="storage_used", description="Bytes")
    last_activity: Optional[Timestamp] = Field(None, alias="last_activity")


class AddUserToTenantRequest(RequestModel):
    user_id: str = Field(..., alias="user_id")


# Roles

def _permission_list(value: Any) -> Any:
    # Some endpoints return the permission list as a JSON-encoded string.
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return value
        return decoded
    if value is None:
        return []
    return value


class Role(ApiModel):
    """RBAC role."""

    id: str
    name: str
    description: Optional[str] = None
    is_system: bool = Field(False, alias="is_system", description="Built-in role, not editable")
    permissions: Annotated[List[str], BeforeValidator(_permission_list)] = Field(default_factory=list)
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    updated_at: Optional[Timestamp] = Field(None, alias="updated_at")


class Permission(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None


class CreateRoleRequest(RequestModel):
    name: str
    description: Optional[str] = None
    permissions: List[str]


class UpdateRoleRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


class RoleFilter(BaseModel):
    include_system: bool = False
    tenant_id: Optional[str] = None
    limit: int = 50
    offset: int = 0


class AssignRoleRequest(RequestModel):
    user_id: str = Field(..., alias="user_id")
    role_id: str = Field(..., alias="role_id")


class AddPermissionRequest(RequestModel):
    permission: str


# Policies

class PolicyEffect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class PolicyCondition(BaseModel):
    type: str = Field(..., description="Condition operator, e.g. StringEquals")
    key: str
    values: List[str]


class PolicyStatement(BaseModel):
    effect: PolicyEffect
    actions: List[str]
    resources: List[str]
    conditions: Optional[List[PolicyCondition]] = None


class PolicyDocument(BaseModel):
    """ABAC policy document; stored server-side as a JSON string."""

    version: str = "2024-01-01"
    statements: List[PolicyStatement]

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True, indent=2)


class Policy(ApiModel):
    """ABAC policy."""

    id: str
    name: str
    description: Optional[str] = None
    policy_document: str = Field(..., alias="policy_document", description="JSON policy document")
    is_active: bool = Field(True, alias="is_active")
    created_by: Optional[str] = Field(None, alias="created_by")
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    updated_at: Optional[Timestamp] = Field(None, alias="updated_at")

    @property
    def document(self) -> PolicyDocument:
        """The parsed policy document."""
        return PolicyDocument.model_validate_json(self.policy_document)


class CreatePolicyRequest(RequestModel):
    name: str
    description: Optional[str] = None
    policy_document: str = Field(..., alias="policy_document")


class UpdatePolicyRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    policy_document: Optional[str] = Field(None, alias="policy_document")
    is_active: Optional[bool] = Field(None, alias="is_active")


class PolicyFilter(BaseModel):
    is_active: Optional[bool] = None
    limit: int = 50
    offset: int = 0


class PolicyAttachment(ApiModel):
    policy_id: str = Field(..., alias="policy_id")
    user_id: Optional[str] = Field(None, alias="user_id")
    role_id: Optional[str] = Field(None, alias="role_id")
    attached_by: Optional[str] = Field(None, alias="attached_by")
    attached_at: Optional[Timestamp] = Field(None, alias="attached_at")


class AttachPolicyRequest(RequestModel):
    policy_id: str = Field(..., alias="policy_id")
    user_id: Optional[str] = Field(None, alias="user_id")
    role_id: Optional[str] = Field(None, alias="role_id")


class PolicyEvaluationRequest(RequestModel):
    user_id: str = Field(..., alias="user_id")
    action: str
    resource: str
    context: Optional[Dict[str, str]] = None


class PolicyEvaluationResult(ApiModel):
    allowed: bool
    matched_policies: Optional[List[str]] = Field(None, alias="matched_policies")
    denied_by: Optional[str] = Field(None, alias="denied_by")
    reason: Optional[str] = None


# Secrets

class SecretType(str, Enum):
    """Types of secrets supported by ZN-Vault."""
    OPAQUE = "opaque"
    CREDENTIAL = "credential"
    SETTING = "setting"


class Secret(ApiModel):
    """Secret metadata (without the decrypted value)."""

    id: str = Field(..., description="Unique secret identifier")
    alias: str = Field(..., description="Secret alias, e.g. api/prod/db-creds")
    tenant: str = Field(..., description="Owning tenant")
    type: SecretType = Field(..., description="Secret type")
    version: int = Field(..., description="Current version")
    tags: Optional[List[str]] = Field(None, description="Secret tags")
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    updated_at: Optional[Timestamp] = Field(None, alias="updated_at")
    ttl_until: Optional[Timestamp] = Field(None, alias="ttl_until", description="Expiration timestamp")
    content_type: Optional[str] = Field(None, alias="content_type")
    created_by: Optional[str] = Field(None, alias="created_by")
    checksum: Optional[str] = None


class SecretData(ApiModel):
    """Decrypted secret payload."""

    data: Dict[str, JsonValue] = Field(..., description="Decrypted key/value payload")
    decrypted_at: Optional[Timestamp] = Field(None, alias="decrypted_at")


class CreateSecretRequest(RequestModel):
    alias: str
    type: SecretType
    data: Dict[str, JsonValue]
    tags: Optional[List[str]] = None
    ttl_until: Optional[Timestamp] = Field(None, alias="ttl_until")


class UpdateSecretRequest(RequestModel):
    data: Dict[str, JsonValue]
    tags: Optional[List[str]] = None


class RotateSecretRequest(RequestModel):
    data: Dict[str, JsonValue]


class RollbackRequest(RequestModel):
    version: int


class SecretFilter(BaseModel):
    """Filter for listing secrets."""

    type: Optional[SecretType] = None
    tags: Optional[List[str]] = None
    limit: int = 50
    offset: int = 0


class SecretVersion(ApiModel):
    """Historical version of a secret."""

    id: int
    version: int
    tenant: Optional[str] = None
    alias: Optional[str] = None
    type: Optional[str] = None
    tags: Optional[List[str]] = None
    created_at: Optional[Timestamp] = Field(None, alias="created_at")
    created_by: Optional[str] = Field(None, alias="created_by")
    checksum: Optional[str] = None


class SecretHistoryResponse(ApiModel):
    history: List[SecretVersion] = Field(default_factory=list)
    count: int = 0


# KMS

class KeyUsage(str, Enum):
    ENCRYPT_DECRYPT = "ENCRYPT_DECRYPT"
    SIGN_VERIFY = "SIGN_VERIFY"
    GENERATE_DATA_KEY = "GENERATE_DATA_KEY"


class KeySpec(str, Enum):
    AES_256 = "AES_256"
    AES_128 = "AES_128"
    RSA_2048 = "RSA_2048"
    RSA_4096 = "RSA_4096"
    ECC_NIST_P256 = "ECC_NIST_P256"
    ECC_NIST_P384 = "ECC_NIST_P384"


class KeyOrigin(str, Enum):
    ZN_VAULT = "ZN_VAULT"
    EXTERNAL = "EXTERNAL"
    AWS_KMS = "AWS_KMS"


class KeyState(str, Enum):
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"
    PENDING_DELETION = "PENDING_DELETION"
    PENDING_IMPORT = "PENDING_IMPORT"


class KeyTag(ApiModel):
    key: str
    value: str


class KmsKey(ApiModel):
    """KMS customer master key."""

    key_id: str = Field(..., alias="keyId", description="Key identifier")
    alias: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[KeyUsage] = Field(None, alias="keyUsage")
    key_spec: Optional[KeySpec] = Field(None, alias="keySpec")
    origin: KeyOrigin = KeyOrigin.ZN_VAULT
    state: Optional[KeyState] = Field(None, alias="keyState")
    tenant: Optional[str] = None
    arn: Optional[str] = None
    created_date: Optional[Timestamp] = Field(None, alias="createdDate")
    deletion_date: Optional[Timestamp] = Field(None, alias="deletionDate")
    multi_region: bool = Field(False, alias="multiRegion")
    tags: List[KeyTag] = Field(default_factory=list)
    current_version: int = Field(1, alias="currentVersion")

    @property
    def id(self) -> str:
        return self.key_id

    @property
    def enabled(self) -> bool:
        return self.state == KeyState.ENABLED


class KmsKeyVersion(ApiModel):
    version: int
    created_date: Optional[Timestamp] = Field(None, alias="created_date")
    status: Optional[str] = None


class CreateKmsKeyRequest(RequestModel):
    alias: Optional[str] = None
    description: Optional[str] = None
    usage: KeyUsage = KeyUsage.ENCRYPT_DECRYPT
    key_spec: KeySpec = Field(KeySpec.AES_256, alias="key_spec")
    tags: Optional[Dict[str, str]] = None
    rotation_enabled: Optional[bool] = Field(None, alias="rotation_enabled")
    rotation_days: Optional[int] = Field(None, alias="rotation_days")


class UpdateKmsKeyRequest(RequestModel):
    description: Optional[str] = None
    tags: Optional[Dict[str, str]] = None


class KeyFilter(BaseModel):
    """Filter for listing KMS keys."""

    tenant: Optional[str] = None
    state: Optional[KeyState] = None
    usage: Optional[KeyUsage] = None
    limit: int = 50
    offset: int = 0


class EncryptRequest(RequestModel):
    key_id: str = Field(..., alias="keyId")
    plaintext: str
    context: Dict[str, str] = Field(default_factory=dict)


class DecryptRequest(RequestModel):
    key_id: str = Field(..., alias="keyId")
    ciphertext: str
    context: Dict[str, str] = Field(default_factory=dict)


class GenerateDataKeyRequest(RequestModel):
    key_id: str = Field(..., alias="key_id")
    key_spec: KeySpec = Field(KeySpec.AES_256, alias="key_spec")
    context: Dict[str, str] = Field(default_factory=dict)


class ScheduleDeletionRequest(RequestModel):
    pending_window_days: int = Field(7, alias="pending_window_days")


class EncryptResult(ApiModel):
    ciphertext: str = Field(..., description="Base64 ciphertext")
    key_id: str = Field(..., alias="keyId")
    encryption_context: Optional[Dict[str, str]] = Field(None, alias="encryptionContext")
    key_version: Optional[int] = Field(None, alias="keyVersion")


class DecryptResult(ApiModel):
    plaintext: str = Field(..., description="Base64 plaintext")
    key_id: str = Field(..., alias="keyId")
    encryption_context: Optional[Dict[str, str]] = Field(None, alias="encryptionContext")


class DataKeyResult(ApiModel):
    plaintext_key: str = Field("", alias="plaintext_key", description="Base64 data key")
    encrypted_key: str = Field(..., alias="encrypted_key", description="Base64 wrapped data key")
    key_id: str = Field(..., alias="key_id")


# Certificates

class CertificateType(str, Enum):
    P12 = "P12"
    PEM = "PEM"
    DER = "DER"


class CertificatePurpose(str, Enum):
    TLS = "TLS"
    MTLS = "mTLS"
    SIGNING = "SIGNING"
    ENCRYPTION = "ENCRYPTION"
    AUTHENTICATION = "AUTHENTICATION"


class CertificateStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"
    SUSPENDED = "SUSPENDED"
    PENDING_DELETION = "PENDING_DELETION"


class Certificate(ApiModel):
    """Certificate metadata (without the certificate data)."""

    id: str
    tenant_id: str = Field(..., alias="tenantId")
    client_id: str = Field(..., alias="clientId", description="External customer identifier")
    kind: str = Field(..., description="Certificate kind, e.g. AEAT, FNMT, CUSTOM")
    alias: str
    certificate_type: CertificateType = Field(..., alias="certificateType")
    purpose: CertificatePurpose
    fingerprint_sha256: str = Field(..., alias="fingerprintSha256")
    subject_cn: str = Field(..., alias="subjectCn")
    issuer_cn: str = Field(..., alias="issuerCn")
    not_before: Timestamp = Field(..., alias="notBefore")
    not_after: Timestamp = Field(..., alias="notAfter")
    client_name: Optional[str] = Field(None, alias="clientName")
    organization_id: Optional[str] = Field(None, alias="organizationId")
    contact_email: Optional[str] = Field(None, alias="contactEmail")
    status: CertificateStatus
    version: int = 1
    created_at: Optional[Timestamp] = Field(None, alias="createdAt")
    created_by: Optional[str] = Field(None, alias="createdBy")
    updated_at: Optional[Timestamp] = Field(None, alias="updatedAt")
    last_accessed_at: Optional[Timestamp] = Field(None, alias="lastAccessedAt")
    access_count: int = Field(0, alias="accessCount")
    tags: List[str] = Field(default_factory=list)
    days_until_expiry: Optional[int] = Field(None, alias="daysUntilExpiry")
    is_expired: bool = Field(False, alias="isExpired")


class DecryptedCertificate(ApiModel):
    id: str
    certificate_data: str = Field(..., alias="certificateData", description="Base64 certificate data")
    certificate_type: CertificateType = Field(..., alias="certificateType")
    fingerprint_sha256: str = Field(..., alias="fingerprintSha256")


class StoreCertificateRequest(RequestModel):
    client_id: str = Field(..., alias="clientId")
    kind: str
    alias: str
    certificate_data: str = Field(..., alias="certificateData")
    certificate_type: CertificateType = Field(..., alias="certificateType")
    purpose: CertificatePurpose
    passphrase: Optional[str] = None
    client_name: Optional[str] = Field(None, alias="clientName")
    organization_id: Optional[str] = Field(None, alias="organizationId")
    contact_email: Optional[str] = Field(None, alias="contactEmail")
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, JsonValue]] = None


class UpdateCertificateRequest(RequestModel):
    alias: Optional[str] = None
    client_name: Optional[str] = Field(None, alias="clientName")
    contact_email: Optional[str] = Field(None, alias="contactEmail")
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, JsonValue]] = None


class RotateCertificateRequest(RequestModel):
    certificate_data: str = Field(..., alias="certificateData")
    certificate_type: CertificateType = Field(..., alias="certificateType")
    passphrase: Optional[str] = None
    reason: Optional[str] = None


class DecryptCertificateRequest(RequestModel):
    purpose: str = Field(..., description="Business justification, recorded in the audit log")


class CertificateFilter(BaseModel):
    """Filter for listing certificates."""

    client_id: Optional[str] = None
    kind: Optional[str] = None
    status: Optional[CertificateStatus] = None
    expiring_before: Optional[Timestamp] = None
    tags: Optional[List[str]] = None
    page: int = 1
    page_size: int = 20


class CertificateListResponse(ApiModel):
    """Page-numbered certificate listing."""

    items: List[Certificate] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = Field(20, alias="pageSize")


class CertificateAccessLogEntry(ApiModel):
    id: int
    certificate_id: str = Field(..., alias="certificateId")
    tenant_id: str = Field(..., alias="tenantId")
    user_id: Optional[str] = Field(None, alias="userId")
    api_key_id: Optional[str] = Field(None, alias="apiKeyId")
    purpose: str
    operation: str
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    accessed_at: Timestamp = Field(..., alias="accessedAt")
    success: bool
    error_message: Optional[str] = Field(None, alias="errorMessage")


class CertificateAccessLogResponse(ApiModel):
    entries: List[CertificateAccessLogEntry] = Field(default_factory=list)


class CertificateStats(ApiModel):
    total: int
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    by_kind: Dict[str, int] = Field(default_factory=dict, alias="byKind")
    expiring_in_30_days: int = Field(0, alias="expiringIn30Days")
    expiring_in_7_days: int = Field(0, alias="expiringIn7Days")


# Audit

class AuditEntry(ApiModel):
    """Audit log entry."""

    id: int
    timestamp: Timestamp = Field(..., alias="ts")
    client_cn: Optional[str] = Field(None, alias="client_cn")
    action: str
    resource: str
    result: str
    ip: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="user_id")
    username: Optional[str] = None
    tenant_id: Optional[str] = Field(None, alias="tenant_id")
    metadata: Optional[Dict[str, JsonValue]] = None


class AuditFilter(BaseModel):
    """Filter for querying the audit log."""

    client_cn: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    result: Optional[str] = None
    start_date: Optional[Timestamp] = None
    end_date: Optional[Timestamp] = None
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    limit: int = 100
    offset: int = 0


class AuditStats(ApiModel):
    total: int
    by_action: Dict[str, int] = Field(default_factory=dict, alias="by_action")
    by_result: Dict[str, int] = Field(default_factory=dict, alias="by_result")
    recent_failures: int = Field(0, alias="recent_failures")


class AuditVerifyResult(ApiModel):
    valid: bool
    entries_verified: int = Field(0, alias="entries_verified")
    broken_at: Optional[int] = Field(None, alias="broken_at")
    message: Optional[str] = None


class AuditExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


# Health

class DatabaseHealth(ApiModel):
    status: str
    connected: Optional[bool] = None
    path: Optional[str] = None


class KmsHealth(ApiModel):
    status: str
    initialized: Optional[bool] = None
    key_count: Optional[int] = Field(None, alias="key_count")


class HealthResponse(ApiModel):
    """Health check response."""

    status: str
    version: Optional[str] = None
    uptime: Optional[float] = None
    timestamp: Optional[Timestamp] = None
    database: Optional[DatabaseHealth] = None
    kms: Optional[KmsHealth] = None

    @property
    def is_healthy(self) -> bool:
        return self.status in ("ok", "healthy")


class CheckResult(ApiModel):
    status: str
    message: Optional[str] = None
    latency: Optional[float] = None


class ReadinessResponse(ApiModel):
    ready: bool
    checks: Optional[Dict[str, CheckResult]] = None


class LivenessResponse(ApiModel):
    alive: bool
    timestamp: Optional[Timestamp] = None
