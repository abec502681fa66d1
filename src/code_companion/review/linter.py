# src/code_companion/review/linter.py
import os
import re
import logging
from code_companion.models.findings import FileUnderReview, LintFinding
from code_companion.models.review import LintResult
from code_companion.models.rules import (
    ComplexityRule,
    ImportDuplicateRule,
    LineLengthRule,
    LintRule,
    PatternRule,
)
from code_companion.models.severity import LintSeverity
from .parser import column_number, line_number


logger = logging.getLogger(__name__)


DEFAULT_RULES: list[LintRule] = [
    PatternRule(
        name="no-console-log",
        pattern=r"console\.(log|debug|info)",
        message="Remove console statements before production",
        severity=LintSeverity.WARNING,
        file_types=[".js", ".jsx", ".ts", ".tsx"],
    ),
    PatternRule(
        name="no-todo-comments",
        pattern=r"(?://|#)\s*(TODO|FIXME|HACK)",
        ignore_case=True,
        message="TODO comment found - create a ticket instead",
        severity=LintSeverity.INFO,
        file_types=[".js", ".jsx", ".ts", ".tsx", ".py", ".java"],
    ),
    LineLengthRule(
        name="max-line-length",
        max_length=120,
        message="Line exceeds maximum length of 120 characters",
        severity=LintSeverity.WARNING,
    ),
    PatternRule(
        name="no-magic-numbers",
        pattern=r"(?<![0-9])[0-9]{2,}(?![0-9])",
        message="Magic number detected - consider using a named constant",
        severity=LintSeverity.INFO,
        exceptions=[0, 1, 100, 1000],
    ),
    ComplexityRule(
        name="function-complexity",
        max_complexity=10,
        message="Function complexity exceeds threshold",
        severity=LintSeverity.WARNING,
    ),
    ImportDuplicateRule(
        name="no-duplicate-imports",
        message="Duplicate import detected",
        severity=LintSeverity.ERROR,
    ),
]

# Textual approximation of cyclomatic complexity; "else if" is counted twice.
COMPLEXITY_PATTERNS = [
    re.compile(r"if\s*\("),
    re.compile(r"else\s+if\s*\("),
    re.compile(r"for\s*\("),
    re.compile(r"while\s*\("),
    re.compile(r"case\s+"),
    re.compile(r"catch\s*\("),
    re.compile(r"\?\s*[^:]+\s*:"),  # ternary
    re.compile(r"&&"),
    re.compile(r"\|\|"),
]

IMPORT_PATTERN = re.compile(r"import\s+(?:\{[^}]+\}|\w+)\s+from\s+['\"]([^'\"]+)['\"]")
ASYNC_FUNCTION_PATTERN = re.compile(
    r"async\s+(?:function\s*\w*\s*\([^)]*\)|\([^)]*\)\s*=>|\w+\s*\([^)]*\))\s*\{[^}]*\}"
)
DECLARATION_PATTERN = re.compile(r"(?:const|let|var)\s+(\w+)\s*=")
EMPTY_CATCH_PATTERNS = [
    re.compile(r"\.catch\s*\(\s*\)"),
    re.compile(r"catch\s*\([^)]*\)\s*\{\s*\}"),
    re.compile(r"except\b[^:\n]*:\s*(?:\n\+?\s*)?pass\b"),
]


def calculate_complexity(code: str) -> int:
    complexity = 1
    for pattern in COMPLEXITY_PATTERNS:
        complexity += len(pattern.findall(code))
    return complexity


def extract_imports(content: str) -> list[str]:
    return [match.group(1) for match in IMPORT_PATTERN.finditer(content)]


def find_duplicates(items: list[str]) -> list[str]:
    """Items seen more than once, in order of their second occurrence."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for item in items:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def categorize_by_severity(findings: list[LintFinding]) -> dict[LintSeverity, list[LintFinding]]:
    buckets: dict[LintSeverity, list[LintFinding]] = {severity: [] for severity in LintSeverity}
    for finding in findings:
        buckets[finding.severity].append(finding)
    return buckets


def generate_summary(issues: dict[LintSeverity, list[LintFinding]]) -> str:
    total = sum(len(bucket) for bucket in issues.values())
    if total == 0:
        return "✅ No linting issues found"

    lines = ["📝 Custom Linting Results:"]
    headers = [
        (LintSeverity.ERROR, "❌ **Errors ({count})**: Must be fixed", True),
        (LintSeverity.WARNING, "⚠️ **Warnings ({count})**: Should be addressed", True),
        (LintSeverity.INFO, "ℹ️ **Info ({count})**: Suggestions for improvement", False),
    ]
    for severity, header, list_items in headers:
        bucket = issues.get(severity, [])
        if not bucket:
            continue
        lines.append("")
        lines.append(header.format(count=len(bucket)))
        if list_items:
            for finding in bucket[:3]:
                lines.append(f"  - {finding.rule}: {finding.message} in {finding.file}")

    return "\n".join(lines) + "\n"


class CustomLinter:
    def __init__(self, default_rules: list[LintRule] | None = None):
        self.default_rules = DEFAULT_RULES if default_rules is None else default_rules

    def lint_files(
        self,
        files: list[FileUnderReview],
        custom_rules: list[LintRule] | None = None,
    ) -> LintResult:
        rules = [*self.default_rules, *(custom_rules or [])]
        findings: list[LintFinding] = []
        for file in files:
            findings.extend(self.lint_file(file, rules))

        issues = categorize_by_severity(findings)
        return LintResult(
            issues=issues,
            summary=generate_summary(issues),
            total=len(findings),
        )

    def lint_file(self, file: FileUnderReview, rules: list[LintRule]) -> list[LintFinding]:
        if not file.patch:
            return []
        content = file.patch
        extension = os.path.splitext(file.filename)[1]
        findings: list[LintFinding] = []

        for rule in rules:
            if not rule.applies_to(extension):
                continue
            try:
                findings.extend(self._apply_rule(rule, file.filename, content))
            except Exception as e:
                logger.warning(f"Lint rule {rule.name!r} failed on {file.filename}: {e}")

        findings.extend(self._adhoc_checks(file.filename, content))
        return findings

    def _apply_rule(self, rule: LintRule, filename: str, content: str) -> list[LintFinding]:
        if isinstance(rule, PatternRule):
            return self._check_pattern(rule, filename, content)
        if isinstance(rule, LineLengthRule):
            return self._check_line_length(rule, filename, content)
        if isinstance(rule, ComplexityRule):
            return self._check_complexity(rule, filename, content)
        if isinstance(rule, ImportDuplicateRule):
            return self._check_imports(rule, filename, content)
        raise TypeError(f"Unsupported lint rule kind: {type(rule).__name__}")

    def _check_pattern(self, rule: PatternRule, filename: str, content: str) -> list[LintFinding]:
        findings = []
        for match in rule.regex().finditer(content):
            if rule.is_exception(match.group(0)):
                continue
            findings.append(LintFinding(
                file=filename,
                line=line_number(content, match.start()),
                column=column_number(content, match.start()),
                severity=rule.severity,
                rule=rule.name,
                message=rule.message,
            ))
        return findings

    def _check_line_length(self, rule: LineLengthRule, filename: str, content: str) -> list[LintFinding]:
        return [
            LintFinding(
                file=filename,
                line=index + 1,
                severity=rule.severity,
                rule=rule.name,
                message=f"{rule.message} ({len(line)} chars)",
            )
            for index, line in enumerate(content.split("\n"))
            if len(line) > rule.max_length
        ]

    def _check_complexity(self, rule: ComplexityRule, filename: str, content: str) -> list[LintFinding]:
        complexity = calculate_complexity(content)
        if complexity <= rule.max_complexity:
            return []
        return [LintFinding(
            file=filename,
            severity=rule.severity,
            rule=rule.name,
            message=f"{rule.message} (complexity: {complexity})",
        )]

    def _check_imports(self, rule: ImportDuplicateRule, filename: str, content: str) -> list[LintFinding]:
        return [
            LintFinding(
                file=filename,
                severity=rule.severity,
                rule=rule.name,
                message=f"{rule.message}: {duplicate}",
            )
            for duplicate in find_duplicates(extract_imports(content))
        ]

    def _adhoc_checks(self, filename: str, content: str) -> list[LintFinding]:
        findings = []

        for match in ASYNC_FUNCTION_PATTERN.finditer(content):
            if "await" not in match.group(0):
                findings.append(LintFinding(
                    file=filename,
                    line=line_number(content, match.start()),
                    severity=LintSeverity.WARNING,
                    rule="async-without-await",
                    message="Async function without await",
                ))

        # Plain occurrence count: comments and strings count as usage, scopes are ignored.
        for match in DECLARATION_PATTERN.finditer(content):
            name = match.group(1)
            usages = len(re.findall(rf"\b{re.escape(name)}\b", content))
            if usages == 1:
                findings.append(LintFinding(
                    file=filename,
                    line=line_number(content, match.start()),
                    severity=LintSeverity.WARNING,
                    rule="unused-variable",
                    message=f"Unused variable: {name}",
                ))

        empty_catches = [
            match
            for pattern in EMPTY_CATCH_PATTERNS
            for match in pattern.finditer(content)
        ]
        if empty_catches:
            first = min(empty_catches, key=lambda match: match.start())
            findings.append(LintFinding(
                file=filename,
                line=line_number(content, first.start()),
                severity=LintSeverity.ERROR,
                rule="empty-catch",
                message="Empty catch block - handle or log errors properly",
            ))

        return findings
