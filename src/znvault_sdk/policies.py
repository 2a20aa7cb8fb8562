"""
Attribute-based access control (ABAC) policies for ZN-Vault SDK.
"""

import logging
from typing import AsyncIterator, Dict, List, Optional, Union

from .http import HttpClient, QueryParams
from .models import (
    AttachPolicyRequest,
    CreatePolicyRequest,
    Policy,
    PolicyAttachment,
    PolicyCondition,
    PolicyDocument,
    PolicyEffect,
    PolicyEvaluationRequest,
    PolicyEvaluationResult,
    PolicyFilter,
    PolicyStatement,
    UpdatePolicyRequest,
)
from .pagination import Page, iterate_pages

logger = logging.getLogger(__name__)

Document = Union[PolicyDocument, str]


def _document_json(document: Document) -> str:
    if isinstance(document, PolicyDocument):
        return document.to_json()
    return document


def allow_policy(
    actions: List[str],
    resources: List[str],
    conditions: Optional[List[PolicyCondition]] = None,
) -> PolicyDocument:
    """Build a single-statement document allowing actions on resources."""
    return PolicyDocument(
        statements=[
            PolicyStatement(
                effect=PolicyEffect.ALLOW,
                actions=actions,
                resources=resources,
                conditions=conditions,
            )
        ]
    )


def deny_policy(
    actions: List[str],
    resources: List[str],
    conditions: Optional[List[PolicyCondition]] = None,
) -> PolicyDocument:
    """Build a single-statement document denying actions on resources."""
    return PolicyDocument(
        statements=[
            PolicyStatement(
                effect=PolicyEffect.DENY,
                actions=actions,
                resources=resources,
                conditions=conditions,
            )
        ]
    )


class PolicyClient:
    """Policy CRUD, attachments and evaluation."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        name: str,
        document: Document,
        description: Optional[str] = None,
    ) -> Policy:
        """
        Create a policy.

        Args:
            name: Policy name
            document: A PolicyDocument, or its JSON text
            description: Free-form description

        Returns:
            The created policy
        """
        request = CreatePolicyRequest(
            name=name,
            description=description,
            policy_document=_document_json(document),
        )
        policy = await self._http.post("/v1/admin/policies", request, response_type=Policy)
        logger.info(f"Created policy {policy.name} ({policy.id})")
        return policy

    async def get(self, policy_id: str) -> Policy:
        return await self._http.get(f"/v1/admin/policies/{policy_id}", response_type=Policy)

    async def list(self, filter: Optional[PolicyFilter] = None) -> Page[Policy]:
        filter = filter or PolicyFilter()
        query: QueryParams = {}
        if filter.is_active is not None:
            query["isActive"] = "true" if filter.is_active else "false"
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/admin/policies", query=query, response_type=Page[Policy])

    async def list_all(self, filter: Optional[PolicyFilter] = None) -> AsyncIterator[Policy]:
        filter = filter or PolicyFilter()

        async def fetch(offset: int) -> Page[Policy]:
            return await self.list(filter.model_copy(update={"offset": offset}))

        async for policy in iterate_pages(fetch, filter.offset):
            yield policy

    async def update(
        self,
        policy_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        document: Optional[Document] = None,
        is_active: Optional[bool] = None,
    ) -> Policy:
        request = UpdatePolicyRequest(
            name=name,
            description=description,
            policy_document=_document_json(document) if document is not None else None,
            is_active=is_active,
        )
        return await self._http.patch(
            f"/v1/admin/policies/{policy_id}", request, response_type=Policy
        )

    async def delete(self, policy_id: str) -> None:
        await self._http.delete(f"/v1/admin/policies/{policy_id}")

    async def activate(self, policy_id: str) -> Policy:
        return await self._http.post(
            f"/v1/admin/policies/{policy_id}/activate", response_type=Policy
        )

    async def deactivate(self, policy_id: str) -> Policy:
        return await self._http.post(
            f"/v1/admin/policies/{policy_id}/deactivate", response_type=Policy
        )

    # Attachments

    async def attach_to_user(self, policy_id: str, user_id: str) -> PolicyAttachment:
        return await self._http.post(
            f"/v1/admin/policies/{policy_id}/attach",
            AttachPolicyRequest(policy_id=policy_id, user_id=user_id),
            response_type=PolicyAttachment,
        )

    async def attach_to_role(self, policy_id: str, role_id: str) -> PolicyAttachment:
        return await self._http.post(
            f"/v1/admin/policies/{policy_id}/attach",
            AttachPolicyRequest(policy_id=policy_id, role_id=role_id),
            response_type=PolicyAttachment,
        )

    async def detach_from_user(self, policy_id: str, user_id: str) -> None:
        await self._http.delete(f"/v1/admin/policies/{policy_id}/users/{user_id}")

    async def detach_from_role(self, policy_id: str, role_id: str) -> None:
        await self._http.delete(f"/v1/admin/policies/{policy_id}/roles/{role_id}")

    async def list_attachments(self, policy_id: str) -> List[PolicyAttachment]:
        return await self._http.get(
            f"/v1/admin/policies/{policy_id}/attachments", response_type=List[PolicyAttachment]
        )

    async def evaluate(
        self,
        user_id: str,
        action: str,
        resource: str,
        context: Optional[Dict[str, str]] = None,
    ) -> PolicyEvaluationResult:
        """
        Ask the server whether a user may perform an action on a resource.

        Args:
            user_id: User to evaluate for
            action: Action name, e.g. ``secret:read``
            resource: Resource identifier
            context: Extra request attributes used by policy conditions
        """
        request = PolicyEvaluationRequest(
            user_id=user_id, action=action, resource=resource, context=context
        )
        return await self._http.post(
            "/v1/admin/policies/evaluate", request, response_type=PolicyEvaluationResult
        )
