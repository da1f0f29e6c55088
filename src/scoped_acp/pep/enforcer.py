"""PolicyEnforcer - resolve, evaluate and enforce in one call.

Framework adapters (HTTP middleware, route guards, RPC interceptors) build an
EvaluationContext from their request and call the enforcer:

    enforcer = PolicyEnforcer(provider, decision_logger=decision_logger)

    decision = await enforcer.enforce(
        "erp:invoice:approve",
        f"invoice/{invoice_id}",
        ctx,
        message="Cannot approve invoice",
    )

Request flow:
1. Pick the scope (explicit argument, else ctx.scope)
2. Resolve policies from the provider (principal + roles + groups, exact scope)
3. Evaluate them with evaluate_all (deny overrides allow)
4. Log the decision (if a decision logger is configured)
5. enforce() raises ForbiddenError unless allowed

Resolver errors and policy definition errors propagate unchanged. Callers
must treat any exception as a deny.
"""

from __future__ import annotations

__all__ = [
    "PolicyEnforcer",
]

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from scoped_acp.config import AppConfig
from scoped_acp.context import EvaluationContext, Scope
from scoped_acp.exceptions import PolicyDefinitionError
from scoped_acp.pdp.decision import Decision
from scoped_acp.pdp.engine import assert_allowed, evaluate_all
from scoped_acp.prp.models import PolicySource, PrincipalRef
from scoped_acp.prp.protocol import PolicyProvider
from scoped_acp.telemetry.audit.decision_logger import DecisionEventLogger

logger = logging.getLogger(__name__)


class PolicyEnforcer:
    """Policy enforcement point bound to one policy provider.

    Stateless apart from its collaborators, so one instance can serve many
    concurrent requests.
    """

    def __init__(
        self,
        provider: PolicyProvider,
        *,
        decision_logger: DecisionEventLogger | None = None,
        validate: bool = True,
    ) -> None:
        """Initialize the enforcer.

        Args:
            provider: Where policies are resolved from.
            decision_logger: Optional audit logger; every decision is written to it.
            validate: Passed through to evaluate_all.
        """
        self._provider = provider
        self._decision_logger = decision_logger
        self._validate = validate

    @classmethod
    def from_config(cls, provider: PolicyProvider, config: AppConfig) -> "PolicyEnforcer":
        """Create an enforcer using the logging and evaluation settings of config."""
        decision_logger = None
        if config.logging.decision_log:
            decision_logger = DecisionEventLogger.for_log_dir(config.logging.log_dir_path)
        return cls(
            provider,
            decision_logger=decision_logger,
            validate=config.evaluation.validate_policies,
        )

    @property
    def provider(self) -> PolicyProvider:
        return self._provider

    async def decide(
        self,
        action: str,
        resource: str,
        context: EvaluationContext | Mapping[str, Any],
        *,
        scope: Scope | None = None,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> Decision:
        """Resolve applicable policies and evaluate the request.

        Args:
            action: Requested action.
            resource: Requested resource name.
            context: Request context (model or mapping).
            scope: Scope to resolve in; defaults to context.scope.
            role_ids: Role ids; default to context.principal.roles.
            group_ids: Group ids; default to context.principal.groups.

        Returns:
            The combined Decision.

        Raises:
            ValueError: If no scope is given and the context has none.
            PolicyDefinitionError: If a resolved policy cannot be evaluated.
        """
        decision, _ = await self.decide_with_sources(
            action, resource, context, scope=scope, role_ids=role_ids, group_ids=group_ids
        )
        return decision

    async def decide_with_sources(
        self,
        action: str,
        resource: str,
        context: EvaluationContext | Mapping[str, Any],
        *,
        scope: Scope | None = None,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> tuple[Decision, list[PolicySource]]:
        """Like decide(), but also return the policies that were evaluated.

        Returns:
            (decision, resolved policy sources in evaluation order).
        """
        ctx = EvaluationContext.coerce(context)

        effective_scope = scope or ctx.scope
        if effective_scope is None:
            raise ValueError("A scope is required: pass scope= or set context.scope")
        # Conditions must see the scope the policies were resolved in
        if ctx.scope is None or ctx.scope.key != effective_scope.key:
            ctx = ctx.model_copy(update={"scope": effective_scope})

        roles = list(role_ids) if role_ids is not None else list(ctx.principal.roles or ())
        groups = list(group_ids) if group_ids is not None else list(ctx.principal.groups or ())

        start = time.perf_counter()
        sources = await self._provider.get_policies(
            effective_scope,
            PrincipalRef.user(ctx.principal.id),
            role_ids=roles,
            group_ids=groups,
        )

        try:
            decision = evaluate_all(
                action,
                resource,
                [source.document for source in sources],
                ctx,
                validate=self._validate,
            )
        except PolicyDefinitionError as e:
            logger.error(
                "Policy evaluation failed for action=%s in scope %s: %s",
                action,
                effective_scope,
                e,
            )
            raise
        eval_ms = (time.perf_counter() - start) * 1000

        logger.debug(
            "Decision %s (%s) for principal=%s action=%s resource=%s",
            "ALLOW" if decision.allowed else "DENY",
            decision.reason.value,
            ctx.principal.id,
            action,
            resource,
        )

        if self._decision_logger is not None:
            self._decision_logger.log(
                decision,
                action=action,
                resource=resource,
                principal_id=ctx.principal.id,
                scope=effective_scope,
                role_ids=roles,
                group_ids=groups,
                policy_ids=[source.id for source in sources],
                policy_eval_ms=eval_ms,
            )

        return decision, sources

    async def can(
        self,
        action: str,
        resource: str,
        context: EvaluationContext | Mapping[str, Any],
        *,
        scope: Scope | None = None,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> bool:
        """Boolean form of decide()."""
        decision = await self.decide(
            action, resource, context, scope=scope, role_ids=role_ids, group_ids=group_ids
        )
        return decision.allowed

    async def enforce(
        self,
        action: str,
        resource: str,
        context: EvaluationContext | Mapping[str, Any],
        *,
        scope: Scope | None = None,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
        message: str | None = None,
    ) -> Decision:
        """Decide and raise unless allowed.

        Returns:
            The allowing Decision.

        Raises:
            ForbiddenError: If the decision is not an allow.
        """
        decision = await self.decide(
            action, resource, context, scope=scope, role_ids=role_ids, group_ids=group_ids
        )
        return assert_allowed(decision, message)
