# src/code_companion/review/report.py
"""Aggregation of AI, security and lint results into a single review report.

Report generation is a pure function of its inputs: the same three source
results and review level produce the same decision, counts, inline comments
and narrative (apart from the embedded timestamp, which callers can pin via
``generated_at``).
"""
from datetime import datetime, timezone

from code_companion.errors import ConfigurationError
from code_companion.models.findings import (
    AIFinding,
    Comment,
    Finding,
    LintFinding,
    SecurityFinding,
)
from code_companion.models.review import (
    AIIssueBucket,
    AIReviewResult,
    LintResult,
    ReviewMetrics,
    ReviewReport,
    SecurityScanResult,
)
from code_companion.models.severity import (
    AI_SEVERITY_ORDER,
    LINT_SEVERITY_ORDER,
    SECURITY_SEVERITY_ORDER,
    AISeverity,
    Decision,
    FindingSource,
    LintSeverity,
    ReviewLevel,
    SecuritySeverity,
)


SECURITY_PRIORITY = {
    SecuritySeverity.CRITICAL: "🔴 Critical",
    SecuritySeverity.HIGH: "🟠 High",
    SecuritySeverity.MEDIUM: "🟡 Medium",
    SecuritySeverity.LOW: "🟢 Low",
}
AI_PRIORITY = {
    AISeverity.ERROR: "🟠 High",
    AISeverity.WARNING: "🟡 Medium",
    AISeverity.INFO: "🟢 Low",
}
LINT_PRIORITY = {
    LintSeverity.ERROR: "🔴 Errors",
    LintSeverity.WARNING: "⚠️ Warnings",
    LintSeverity.INFO: "ℹ️ Info",
}
NO_PRIORITY = "✅ None"

FOOTER = "---\n*Generated by AI Code Companion*"


def is_critical_equivalent(finding: Finding) -> bool:
    """Map the three severity vocabularies onto the gating decision.

    Only security `critical` and lint `error` block a merge. AI findings are
    informational whatever severity the model assigned them.
    """
    if isinstance(finding, SecurityFinding):
        return finding.severity == SecuritySeverity.CRITICAL
    if isinstance(finding, LintFinding):
        return finding.severity == LintSeverity.ERROR
    return False


def decide(findings: list[Finding]) -> Decision:
    if not findings:
        return Decision.APPROVED
    if any(is_critical_equivalent(finding) for finding in findings):
        return Decision.CHANGES_REQUESTED
    return Decision.REVIEW_SUGGESTED


def _security_findings(security: SecurityScanResult) -> list[SecurityFinding]:
    return [finding for severity in SecuritySeverity for finding in security.issues.get(severity, [])]


def _lint_findings(lint: LintResult) -> list[LintFinding]:
    return [finding for severity in LintSeverity for finding in lint.issues.get(severity, [])]


def derive_inline_comments(
    ai: AIReviewResult,
    security: SecurityScanResult,
    lint: LintResult,
) -> list[Comment]:
    """Every AI comment, plus critical security and error lint findings."""
    comments = [
        Comment(path=finding.file, line=finding.line, body=finding.message)
        for finding in ai.comments
    ]
    comments.extend(
        Comment(
            path=finding.file,
            line=finding.line,
            body=(
                f"🔒 **SECURITY {finding.severity.value.upper()}**: {finding.message}"
                f"\n\n{finding.suggestion}"
            ),
        )
        for finding in security.issues.get(SecuritySeverity.CRITICAL, [])
    )
    comments.extend(
        Comment(
            path=finding.file,
            line=finding.line,
            body=f"📏 **LINTING ERROR**: {finding.message}\n\nRule: `{finding.rule}`",
        )
        for finding in lint.issues.get(LintSeverity.ERROR, [])
    )
    return comments


def _highest(severities, order: dict):
    present = list(severities)
    if not present:
        return None
    return max(present, key=lambda severity: order[severity])


def _priority(findings, order: dict, labels: dict) -> str:
    top = _highest((finding.severity for finding in findings), order)
    return NO_PRIORITY if top is None else labels[top]


def count_by_severity(
    ai_findings: list[AIFinding],
    security_findings: list[SecurityFinding],
    lint_findings: list[LintFinding],
) -> dict[str, dict[str, int]]:
    def tally(findings, vocabulary) -> dict[str, int]:
        counts = {severity.value: 0 for severity in vocabulary}
        for finding in findings:
            counts[finding.severity.value] += 1
        return counts

    return {
        FindingSource.AI.value: tally(ai_findings, AISeverity),
        FindingSource.SECURITY.value: tally(security_findings, SecuritySeverity),
        FindingSource.LINT.value: tally(lint_findings, LintSeverity),
    }


def _status_block(decision: Decision, critical_security: int, lint_errors: int, total: int) -> list[str]:
    if decision == Decision.APPROVED:
        return ["## ✅ Status: APPROVED", "", "No issues found. Great job!"]

    if decision == Decision.CHANGES_REQUESTED:
        reasons = []
        if critical_security:
            reasons.append(f"- {critical_security} critical security issue(s)")
        if lint_errors:
            reasons.append(f"- {lint_errors} linting error(s)")
        return [
            "## ❌ Status: CHANGES REQUESTED",
            "",
            "Critical issues found that must be addressed:",
            *reasons,
        ]

    return [
        "## ⚠️ Status: REVIEW SUGGESTED",
        "",
        f"No blocking issues, but {total} finding(s) should be reviewed.",
    ]


def _recommendations(
    critical_security: int,
    high_security: int,
    lint_errors: int,
    ai: AIReviewResult,
    total: int,
) -> list[str]:
    items = []
    if critical_security:
        items.append("**Address critical security issues immediately**")
    if lint_errors:
        items.append("Fix all linting errors before merge")
    if high_security:
        items.append("Fix high severity security issues before merge")
    if ai.issues.get(AIIssueBucket.PERFORMANCE):
        items.append("Consider performance optimizations suggested")
    if ai.comments:
        items.append("Review all AI suggestions for code quality improvements")
    if not items:
        items.append("Review the remaining findings at your discretion" if total else "No action required")
    return [f"{index}. {item}" for index, item in enumerate(items, start=1)]


def render_narrative(
    ai: AIReviewResult,
    security: SecurityScanResult,
    lint: LintResult,
    review_level: ReviewLevel,
    generated_at: datetime,
) -> str:
    ai_findings = ai.comments
    security_findings = _security_findings(security)
    lint_findings = _lint_findings(lint)
    findings: list[Finding] = [*ai_findings, *security_findings, *lint_findings]

    decision = decide(findings)
    critical_security = len(security.issues.get(SecuritySeverity.CRITICAL, []))
    high_security = len(security.issues.get(SecuritySeverity.HIGH, []))
    lint_errors = len(lint.issues.get(LintSeverity.ERROR, []))

    lines = [
        "# 🤖 AI Code Companion Review Report",
        "",
        f"**Review Level:** {review_level.value}",
        f"**Timestamp:** {generated_at.isoformat()}",
        "",
        *_status_block(decision, critical_security, lint_errors, len(findings)),
        "",
        "## 📊 Metrics",
        "",
        "| Category | Count | Priority |",
        "|----------|-------|----------|",
        f"| Security Issues | {len(security_findings)} | "
        f"{_priority(security_findings, SECURITY_SEVERITY_ORDER, SECURITY_PRIORITY)} |",
        f"| AI Code Review | {len(ai_findings)} | "
        f"{_priority(ai_findings, AI_SEVERITY_ORDER, AI_PRIORITY)} |",
        f"| Linting | {len(lint_findings)} | "
        f"{_priority(lint_findings, LINT_SEVERITY_ORDER, LINT_PRIORITY)} |",
        "",
    ]

    if security_findings:
        lines += ["## 🔒 Security Analysis", "", security.summary.rstrip("\n"), ""]
    if ai_findings:
        lines += ["## 🧠 AI Code Review", "", ai.summary.rstrip("\n"), ""]
    if lint_findings:
        lines += ["## 📝 Custom Linting", "", lint.summary.rstrip("\n"), ""]

    lines += [
        "## 💡 Recommendations",
        "",
        *_recommendations(critical_security, high_security, lint_errors, ai, len(findings)),
        "",
        FOOTER,
    ]
    return "\n".join(lines)


def build_report(
    ai: AIReviewResult | None,
    security: SecurityScanResult | None,
    lint: LintResult | None,
    review_level: ReviewLevel,
    generated_at: datetime | None = None,
) -> ReviewReport:
    """Join the three source results into one decision and report."""
    missing = [
        name
        for name, result in (("ai", ai), ("security", security), ("lint", lint))
        if result is None
    ]
    if missing:
        raise ConfigurationError(f"Missing review source result(s): {', '.join(missing)}")

    generated_at = generated_at or datetime.now(timezone.utc)
    ai_findings = list(ai.comments)
    security_findings = _security_findings(security)
    lint_findings = _lint_findings(lint)
    findings: list[Finding] = [*ai_findings, *security_findings, *lint_findings]

    critical_equivalent = sum(1 for finding in findings if is_critical_equivalent(finding))
    metrics = ReviewMetrics(
        total_issues=len(findings),
        ai_issues=len(ai_findings),
        security_issues=len(security_findings),
        linting_issues=len(lint_findings),
        critical_issues=critical_equivalent,
        high_priority_issues=len(security.issues.get(SecuritySeverity.HIGH, [])),
    )

    return ReviewReport(
        findings=findings,
        counts_by_severity=count_by_severity(ai_findings, security_findings, lint_findings),
        counts_by_source={
            FindingSource.AI.value: len(ai_findings),
            FindingSource.SECURITY.value: len(security_findings),
            FindingSource.LINT.value: len(lint_findings),
        },
        decision=decide(findings),
        narrative_markdown=render_narrative(ai, security, lint, review_level, generated_at),
        inline_comments=derive_inline_comments(ai, security, lint),
        review_level=review_level,
        generated_at=generated_at,
        metrics=metrics,
    )
