"""Policy merge reducers.

apply_override: field-by-field, later source wins. Used for catalog entries
and site overrides.

tighten: a caller override is honored only where it is at least as strict as
the resolved value; looser values are clamped to the resolved value.
"""

from seo_agents.policies.types import BlastRadius, BlastRadiusOverride, Policy, PolicyOverride

_LIMIT_FIELDS = ("max_pages", "max_patches", "timeout_ms")
_STRICT_WHEN_TRUE = ("requires_approval", "respect_robots")


def _merge_blast_radius(current: BlastRadius, override: BlastRadiusOverride | None) -> BlastRadius:
    if override is None:
        return current
    updates = override.model_dump(exclude_none=True)
    return current.model_copy(update=updates)


def apply_override(policy: Policy, override: PolicyOverride | None) -> Policy:
    """Shallow merge: every non-null field of the override replaces the policy's."""
    if override is None:
        return policy

    updates = {}
    for name in override.model_fields_set:
        value = getattr(override, name)
        if value is None:
            continue
        if name == "blast_radius":
            updates[name] = _merge_blast_radius(policy.blast_radius, value)
        elif name == "allowed_domains":
            updates[name] = tuple(value)
        else:
            updates[name] = value

    return policy.model_copy(update=updates)


def tighten(resolved: Policy, requested: PolicyOverride | None) -> tuple[Policy, list[str]]:
    """Apply a caller override under tighten-only semantics.

    Returns:
        (effective policy, names of requested fields that were clamped)
    """
    if requested is None:
        return resolved, []

    updates: dict = {}
    clamped: list[str] = []

    if requested.environment is not None:
        if requested.environment.rank <= resolved.environment.rank:
            updates["environment"] = requested.environment
        else:
            clamped.append("environment")

    for name in _LIMIT_FIELDS:
        wanted = getattr(requested, name)
        if wanted is None:
            continue
        current = getattr(resolved, name)
        if current is None or wanted <= current:
            updates[name] = wanted
        else:
            clamped.append(name)

    for name in _STRICT_WHEN_TRUE:
        wanted = getattr(requested, name)
        if wanted is None:
            continue
        if wanted or not getattr(resolved, name):
            updates[name] = getattr(resolved, name) or wanted
        else:
            clamped.append(name)

    if requested.blast_radius is not None:
        blast, blast_clamped = _tighten_blast_radius(resolved.blast_radius, requested.blast_radius)
        updates["blast_radius"] = blast
        clamped.extend(blast_clamped)

    if requested.allowed_domains:
        domains, narrowed = _tighten_domains(resolved.allowed_domains, requested.allowed_domains)
        updates["allowed_domains"] = domains
        if not narrowed:
            clamped.append("allowed_domains")

    return resolved.model_copy(update=updates), clamped


def _tighten_blast_radius(
    current: BlastRadius, requested: BlastRadiusOverride
) -> tuple[BlastRadius, list[str]]:
    updates: dict = {}
    clamped: list[str] = []

    if requested.scope is not None:
        if requested.scope.rank <= current.scope.rank:
            updates["scope"] = requested.scope
        else:
            clamped.append("blast_radius.scope")

    if requested.max_affected_pages is not None:
        if requested.max_affected_pages <= current.max_affected_pages:
            updates["max_affected_pages"] = requested.max_affected_pages
        else:
            clamped.append("blast_radius.max_affected_pages")

    # A higher declared risk only adds oversight.
    if requested.risk_level is not None:
        if requested.risk_level.rank >= current.risk_level.rank:
            updates["risk_level"] = requested.risk_level
        else:
            clamped.append("blast_radius.risk_level")

    if requested.rollback_required is not None:
        if requested.rollback_required or not current.rollback_required:
            updates["rollback_required"] = requested.rollback_required or current.rollback_required
        else:
            clamped.append("blast_radius.rollback_required")

    return current.model_copy(update=updates), clamped


def _tighten_domains(
    current: tuple[str, ...] | None, requested: list[str]
) -> tuple[tuple[str, ...] | None, bool]:
    """Return (domains, honored). Requested entries may only narrow an existing list.

    An entry narrows when some resolved entry is a substring of it, the same
    rule the safety check matches site URLs with.
    """
    if not current:
        return tuple(requested), True

    narrowed = tuple(domain for domain in requested if any(allowed in domain for allowed in current))
    if not narrowed:
        return current, False
    return narrowed, True
