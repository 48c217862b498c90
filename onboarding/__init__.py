from onboarding.errors import (
    InvalidJob,
    MalformedRow,
    ManifestNotFound,
    OnboardingError,
    RoleAssignmentFailed,
    UnknownPrincipal,
    UnknownResourceType,
)
from onboarding.executor import GrantOutcome, GrantStatus, execute_grant
from onboarding.manifest import GrantRequest, load_manifest
from onboarding.orchestrator import OnboardingJob, RunReport, run_onboarding
from onboarding.scopes import ResourceType, resolve_scope
