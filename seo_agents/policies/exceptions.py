"""Governance error taxonomy.

Decision paths (validate_policy, enforce_runtime_limits) never let these escape;
they are converted into denials. Approval lifecycle calls raise them.
"""

from seo_agents.policies.types import DenialCode


class GovernanceError(Exception):
    """Base exception for all governance errors."""

    pass


# =============================================================================
# Denials
# =============================================================================
class PolicyDenied(GovernanceError):
    """An action is not permitted under the effective policy."""

    code: DenialCode = DenialCode.PERMISSION_DENIED

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class PermissionDenied(PolicyDenied):
    """Ownership, managed-status or subscription check failed."""

    code = DenialCode.PERMISSION_DENIED


class DomainNotAllowed(PolicyDenied):
    """Site domain is not on the policy allowlist."""

    code = DenialCode.DOMAIN_NOT_ALLOWED

    def __init__(self, domain: str, reason: str = "Domain not in allowed list"):
        self.domain = domain
        super().__init__(reason)


class ApprovalRequiredForHighRisk(PolicyDenied):
    """High-risk action targets production without requiring approval."""

    code = DenialCode.APPROVAL_REQUIRED_FOR_HIGH_RISK

    def __init__(self, reason: str = "High-risk actions in production require approval"):
        super().__init__(reason)


class InternalError(GovernanceError):
    """A collaborator call failed unexpectedly."""

    code = DenialCode.INTERNAL_ERROR

    def __init__(self, source: str, reason: str = "Policy validation failed"):
        self.source = source
        self.reason = reason
        super().__init__(f"{source} failed")


# =============================================================================
# Approval lifecycle
# =============================================================================
class ApprovalError(GovernanceError):
    """Base exception for approval lifecycle errors."""

    pass


class ApprovalSubmissionError(ApprovalError):
    """The approval store rejected or failed to persist a request."""

    def __init__(self, action_id: str):
        self.action_id = action_id
        super().__init__(f"Failed to create approval request for action {action_id}")


class ApprovalNotFound(ApprovalError):
    def __init__(self, approval_id: str):
        self.approval_id = approval_id
        super().__init__(f"Approval request not found: {approval_id}")


class ApprovalStateError(ApprovalError):
    """Raised when a non-pending approval is asked to transition."""

    def __init__(self, approval_id: str, status: str):
        self.approval_id = approval_id
        self.status = status
        super().__init__(f"Approval {approval_id} is already {status}")
