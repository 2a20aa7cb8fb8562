"""
Certificate lifecycle management for ZN-Vault SDK.

Certificates are stored encrypted on the server and identified either by ID
or by the (client_id, kind, alias) triple.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import pkcs12

from .dates import format_datetime
from .exceptions import DecodingError, ValidationError
from .http import HttpClient, QueryParams
from .models import (
    Certificate,
    CertificateAccessLogEntry,
    CertificateAccessLogResponse,
    CertificateFilter,
    CertificateListResponse,
    CertificatePurpose,
    CertificateStats,
    CertificateStatus,
    CertificateType,
    DecryptCertificateRequest,
    DecryptedCertificate,
    RotateCertificateRequest,
    StoreCertificateRequest,
    UpdateCertificateRequest,
)
from .pagination import Page

logger = logging.getLogger(__name__)


def _tenant_query(tenant_id: Optional[str]) -> QueryParams:
    return {"tenantId": tenant_id} if tenant_id else {}


def _to_page(response: CertificateListResponse) -> Page[Certificate]:
    offset = (max(response.page, 1) - 1) * response.page_size
    return Page[Certificate](
        items=response.items,
        pagination={
            "total": response.total,
            "limit": response.page_size,
            "offset": offset,
            "hasMore": offset + len(response.items) < response.total,
        },
    )


def pem_fingerprint(pem_data: bytes) -> str:
    """
    Return the SHA-256 fingerprint of a PEM certificate as lowercase hex.

    Raises:
        ValidationError: if pem_data is not a PEM encoded certificate.
    """
    try:
        certificate = x509.load_pem_x509_certificate(pem_data)
    except ValueError as e:
        raise ValidationError(f"Invalid PEM certificate: {e}") from e
    return certificate.fingerprint(hashes.SHA256()).hex()


def _check_p12(p12_data: bytes, passphrase: str) -> None:
    try:
        pkcs12.load_key_and_certificates(p12_data, passphrase.encode("utf-8") if passphrase else None)
    except ValueError as e:
        raise ValidationError(f"Invalid PKCS#12 bundle or passphrase: {e}") from e


class CertificateClient:
    """Store, retrieve, rotate and audit certificates."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def store(
        self,
        request: StoreCertificateRequest,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """Store a certificate described by a full request."""
        return await self._http.post(
            "/v1/certificates",
            request,
            query=_tenant_query(tenant_id),
            response_type=Certificate,
        )

    async def store_pem(
        self,
        client_id: str,
        kind: str,
        alias: str,
        pem_data: bytes,
        purpose: CertificatePurpose,
        client_name: Optional[str] = None,
        organization_id: Optional[str] = None,
        contact_email: Optional[str] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """
        Store a PEM certificate.

        The certificate is parsed locally first, so malformed input fails
        before any request is made.

        Raises:
            ValidationError: if pem_data is not a PEM certificate.
        """
        fingerprint = pem_fingerprint(pem_data)
        logger.debug(f"Storing PEM certificate {client_id}/{kind}/{alias} sha256={fingerprint}")

        request = StoreCertificateRequest(
            client_id=client_id,
            kind=kind,
            alias=alias,
            certificate_data=base64.b64encode(pem_data).decode("ascii"),
            certificate_type=CertificateType.PEM,
            purpose=purpose,
            client_name=client_name,
            organization_id=organization_id,
            contact_email=contact_email,
            tags=tags,
            metadata=metadata,
        )
        return await self.store(request, tenant_id)

    async def store_p12(
        self,
        client_id: str,
        kind: str,
        alias: str,
        p12_data: bytes,
        passphrase: str,
        purpose: CertificatePurpose,
        client_name: Optional[str] = None,
        organization_id: Optional[str] = None,
        contact_email: Optional[str] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """
        Store a PKCS#12 bundle.

        Raises:
            ValidationError: if the bundle cannot be opened with passphrase.
        """
        _check_p12(p12_data, passphrase)

        request = StoreCertificateRequest(
            client_id=client_id,
            kind=kind,
            alias=alias,
            certificate_data=base64.b64encode(p12_data).decode("ascii"),
            certificate_type=CertificateType.P12,
            purpose=purpose,
            passphrase=passphrase,
            client_name=client_name,
            organization_id=organization_id,
            contact_email=contact_email,
            tags=tags,
            metadata=metadata,
        )
        return await self.store(request, tenant_id)

    async def get(self, certificate_id: str, tenant_id: Optional[str] = None) -> Certificate:
        return await self._http.get(
            f"/v1/certificates/{certificate_id}",
            query=_tenant_query(tenant_id),
            response_type=Certificate,
        )

    async def get_by_identity(
        self,
        client_id: str,
        kind: str,
        alias: str,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """Get a certificate by its business identity."""
        path = "/v1/certificates/by-identity/{}/{}/{}".format(
            quote(client_id, safe=""), quote(kind, safe=""), quote(alias, safe="")
        )
        return await self._http.get(path, query=_tenant_query(tenant_id), response_type=Certificate)

    async def list(
        self,
        filter: Optional[CertificateFilter] = None,
        tenant_id: Optional[str] = None,
    ) -> Page[Certificate]:
        """
        List one page of certificates.

        Certificates are paged by page number; the returned Page carries the
        equivalent offset and limit.
        """
        filter = filter or CertificateFilter()
        query: QueryParams = {}
        if filter.client_id:
            query["clientId"] = filter.client_id
        if filter.kind:
            query["kind"] = filter.kind
        if filter.status is not None:
            query["status"] = filter.status.value
        if filter.expiring_before is not None:
            query["expiringBefore"] = format_datetime(filter.expiring_before)
        if filter.tags:
            query["tags"] = ",".join(filter.tags)
        query["page"] = str(filter.page)
        query["pageSize"] = str(filter.page_size)
        query.update(_tenant_query(tenant_id))

        response = await self._http.get(
            "/v1/certificates", query=query, response_type=CertificateListResponse
        )
        return _to_page(response)

    async def list_by_client(
        self,
        client_id: str,
        tenant_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[Certificate]:
        filter = CertificateFilter(client_id=client_id, page=page, page_size=page_size)
        return await self.list(filter, tenant_id)

    async def list_by_kind(
        self,
        kind: str,
        tenant_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[Certificate]:
        """List certificates of one kind, e.g. AEAT or FNMT."""
        filter = CertificateFilter(kind=kind, page=page, page_size=page_size)
        return await self.list(filter, tenant_id)

    async def list_active(
        self,
        tenant_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[Certificate]:
        filter = CertificateFilter(status=CertificateStatus.ACTIVE, page=page, page_size=page_size)
        return await self.list(filter, tenant_id)

    async def list_expired(
        self,
        tenant_id: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[Certificate]:
        filter = CertificateFilter(status=CertificateStatus.EXPIRED, page=page, page_size=page_size)
        return await self.list(filter, tenant_id)

    async def list_expiring(self, days: int = 30, tenant_id: Optional[str] = None) -> List[Certificate]:
        """List certificates expiring within the given number of days."""
        query = {"days": str(days), **_tenant_query(tenant_id)}
        return await self._http.get(
            "/v1/certificates/expiring", query=query, response_type=List[Certificate]
        )

    async def get_stats(self, tenant_id: Optional[str] = None) -> CertificateStats:
        return await self._http.get(
            "/v1/certificates/stats",
            query=_tenant_query(tenant_id),
            response_type=CertificateStats,
        )

    async def update(
        self,
        certificate_id: str,
        request: UpdateCertificateRequest,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """Update certificate metadata."""
        return await self._http.patch(
            f"/v1/certificates/{certificate_id}",
            request,
            query=_tenant_query(tenant_id),
            response_type=Certificate,
        )

    async def decrypt(
        self,
        certificate_id: str,
        purpose: str,
        tenant_id: Optional[str] = None,
    ) -> DecryptedCertificate:
        """
        Decrypt a certificate.

        Args:
            certificate_id: Certificate ID
            purpose: Reason for access, recorded in the access log
            tenant_id: Optional tenant (superadmin only)
        """
        return await self._http.post(
            f"/v1/certificates/{certificate_id}/decrypt",
            DecryptCertificateRequest(purpose=purpose),
            query=_tenant_query(tenant_id),
            response_type=DecryptedCertificate,
        )

    async def download(
        self,
        certificate_id: str,
        purpose: str,
        tenant_id: Optional[str] = None,
    ) -> bytes:
        """Decrypt a certificate and return its raw bytes."""
        decrypted = await self.decrypt(certificate_id, purpose, tenant_id)
        try:
            return base64.b64decode(decrypted.certificate_data, validate=True)
        except binascii.Error as e:
            raise DecodingError(e) from e

    async def rotate(
        self,
        certificate_id: str,
        request: RotateCertificateRequest,
        tenant_id: Optional[str] = None,
    ) -> Certificate:
        """Replace the certificate data; the server bumps the version."""
        return await self._http.post(
            f"/v1/certificates/{certificate_id}/rotate",
            request,
            query=_tenant_query(tenant_id),
            response_type=Certificate,
        )

    async def delete(self, certificate_id: str, tenant_id: Optional[str] = None) -> None:
        await self._http.delete(
            f"/v1/certificates/{certificate_id}", query=_tenant_query(tenant_id)
        )

    async def get_access_log(
        self,
        certificate_id: str,
        limit: int = 100,
        tenant_id: Optional[str] = None,
    ) -> List[CertificateAccessLogEntry]:
        query = {"limit": str(limit), **_tenant_query(tenant_id)}
        response = await self._http.get(
            f"/v1/certificates/{certificate_id}/access-log",
            query=query,
            response_type=CertificateAccessLogResponse,
        )
        return response.entries
