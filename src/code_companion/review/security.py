# src/code_companion/review/security.py
import re
import logging
from dataclasses import dataclass
from code_companion.models.findings import FileUnderReview, SecurityFinding
from code_companion.models.review import SecurityScanResult
from code_companion.models.severity import SecuritySeverity
from .parser import line_number


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SecretRule:
    name: str
    pattern: re.Pattern
    severity: SecuritySeverity


@dataclass(frozen=True)
class VulnerabilityRule:
    name: str
    pattern: re.Pattern
    severity: SecuritySeverity
    description: str


SECRET_RULES = [
    SecretRule("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}", re.I), SecuritySeverity.CRITICAL),
    SecretRule(
        "AWS Secret Key",
        re.compile(r"aws(.{0,20})?['\"][0-9a-zA-Z/+]{40}['\"]", re.I),
        SecuritySeverity.CRITICAL,
    ),
    SecretRule("GitHub Token", re.compile(r"ghp_[0-9a-zA-Z]{36}", re.I), SecuritySeverity.CRITICAL),
    SecretRule(
        "Generic API Key",
        re.compile(r"api[_\-]?key['\"]?\s*[:=]\s*['\"][0-9a-zA-Z\-_]{20,}['\"]", re.I),
        SecuritySeverity.HIGH,
    ),
    SecretRule(
        "Private Key",
        re.compile(r"-----BEGIN (RSA|DSA|EC|OPENSSH) PRIVATE KEY-----", re.I),
        SecuritySeverity.CRITICAL,
    ),
    SecretRule(
        "Database Connection String",
        re.compile(r"['\"]?((mongodb|mysql|postgresql|redis)://[^'\"]+)['\"]", re.I),
        SecuritySeverity.CRITICAL,
    ),
    SecretRule(
        "JWT Secret",
        re.compile(r"jwt[_\-]?secret['\"]?\s*[:=]\s*['\"][^'\"]{10,}['\"]", re.I),
        SecuritySeverity.HIGH,
    ),
]

VULNERABILITY_RULES = [
    VulnerabilityRule(
        "SQL Injection",
        re.compile(r"query\s*\(\s*['\"`].*\$\{.*\}.*['\"`]\s*\)", re.I),
        SecuritySeverity.HIGH,
        "Potential SQL injection vulnerability",
    ),
    VulnerabilityRule(
        "Command Injection",
        re.compile(r"exec\s*\(.*\$\{.*\}", re.I),
        SecuritySeverity.CRITICAL,
        "Potential command injection vulnerability",
    ),
    VulnerabilityRule(
        "XSS",
        re.compile(r"innerHTML\s*=\s*[^'\"`]+(\$\{|user|input|data)", re.I),
        SecuritySeverity.HIGH,
        "Potential XSS vulnerability",
    ),
    VulnerabilityRule(
        "Path Traversal",
        re.compile(r"\.\./|\.\.\\|%2e%2e%2f", re.I),
        SecuritySeverity.MEDIUM,
        "Potential path traversal vulnerability",
    ),
    VulnerabilityRule(
        "Hardcoded Password",
        re.compile(r"password['\"]?\s*[:=]\s*['\"]\w{4,}['\"]", re.I),
        SecuritySeverity.CRITICAL,
        "Hardcoded password detected",
    ),
]

VULNERABILITY_SUGGESTIONS = {
    "SQL Injection": "Use parameterized queries or prepared statements",
    "Command Injection": "Sanitize input and use safe APIs that don't invoke shell",
    "XSS": "Use textContent instead of innerHTML, or sanitize HTML content",
    "Path Traversal": "Validate and sanitize file paths, use path.join()",
    "Hardcoded Password": "Use environment variables or secure key management",
}
DEFAULT_SUGGESTION = "Review and fix the security issue"

SCAN_EXTENSIONS = (
    ".js", ".jsx", ".ts", ".tsx", ".py", ".java", ".cs", ".php",
    ".rb", ".go", ".yml", ".yaml", ".json", ".env",
)

SKIP_PATTERNS = [
    re.compile(r"node_modules"),
    re.compile(r"package-lock\.json"),
    re.compile(r"(^|/)(yarn\.lock|pnpm-lock\.yaml|poetry\.lock|Cargo\.lock)$"),
    re.compile(r"\.min\.js$"),
    re.compile(r"\.min\.css$"),
    re.compile(r"dist/"),
    re.compile(r"build/"),
    re.compile(r"\.map$"),
]

WEAK_RANDOM = re.compile(r"Math\.random\(\)|\brandom\.(random|randint|choice)\(")
SENSITIVE_FILENAME_PARTS = ("auth", "token", "crypto")
DISABLED_SECURITY = re.compile(
    r"csrf:\s*false|helmet:\s*false|cors:\s*\{\s*origin:\s*['\"]\*['\"]", re.I
)
DANGEROUS_EVAL = re.compile(r"eval\s*\(|new\s+Function\s*\(", re.I)


def redact_secret(secret: str) -> str:
    """Keep the first 4 characters of a secret longer than 10 characters."""
    if len(secret) <= 10:
        return secret
    return secret[:4] + "*" * 8 + "..."


def get_vulnerability_suggestion(rule_name: str) -> str:
    return VULNERABILITY_SUGGESTIONS.get(rule_name, DEFAULT_SUGGESTION)


def is_skipped_path(filename: str) -> bool:
    """Generated, vendored and lock files are never analyzed."""
    return any(pattern.search(filename) for pattern in SKIP_PATTERNS)


def should_scan_file(filename: str) -> bool:
    if is_skipped_path(filename):
        return False
    return filename.endswith(SCAN_EXTENSIONS)


def categorize_by_severity(
    findings: list[SecurityFinding],
) -> dict[SecuritySeverity, list[SecurityFinding]]:
    buckets: dict[SecuritySeverity, list[SecurityFinding]] = {
        severity: [] for severity in SecuritySeverity
    }
    for finding in findings:
        buckets[finding.severity].append(finding)
    return buckets


def generate_summary(issues: dict[SecuritySeverity, list[SecurityFinding]]) -> str:
    """Render the security section of the review report."""
    total = sum(len(bucket) for bucket in issues.values())
    if total == 0:
        return "✅ No security issues detected"

    lines = ["🔒 Security Scan Results:"]
    headers = [
        (SecuritySeverity.CRITICAL, "🔴 **CRITICAL ({count})**: Immediate action required", True),
        (SecuritySeverity.HIGH, "🟠 **HIGH ({count})**: Should be fixed before merge", True),
        (SecuritySeverity.MEDIUM, "🟡 **MEDIUM ({count})**: Consider fixing", False),
        (SecuritySeverity.LOW, "🟢 **LOW ({count})**: Minor issues", False),
    ]
    for severity, header, list_items in headers:
        bucket = issues.get(severity, [])
        if not bucket:
            continue
        lines.append("")
        lines.append(header.format(count=len(bucket)))
        if list_items:
            for finding in bucket[:3]:
                lines.append(f"  - {finding.rule} in {finding.file}")

    return "\n".join(lines) + "\n"


class SecurityScanner:
    """Regex-based detection of leaked secrets and common vulnerability patterns."""

    def __init__(
        self,
        secret_rules: list[SecretRule] | None = None,
        vulnerability_rules: list[VulnerabilityRule] | None = None,
    ):
        self.secret_rules = SECRET_RULES if secret_rules is None else secret_rules
        self.vulnerability_rules = (
            VULNERABILITY_RULES if vulnerability_rules is None else vulnerability_rules
        )

    def scan(self, files: list[FileUnderReview]) -> SecurityScanResult:
        findings: list[SecurityFinding] = []
        for file in files:
            if not should_scan_file(file.filename):
                continue
            findings.extend(self.scan_file(file))

        issues = categorize_by_severity(findings)
        return SecurityScanResult(
            issues=issues,
            summary=generate_summary(issues),
            total=len(findings),
            critical=len(issues[SecuritySeverity.CRITICAL]),
            high=len(issues[SecuritySeverity.HIGH]),
        )

    def scan_file(self, file: FileUnderReview) -> list[SecurityFinding]:
        if not file.patch:
            return []
        content = file.patch
        findings: list[SecurityFinding] = []

        for rule in self.secret_rules:
            try:
                findings.extend(self._match_secret(rule, file.filename, content))
            except Exception as e:
                logger.warning(f"Secret rule {rule.name!r} failed on {file.filename}: {e}")

        for rule in self.vulnerability_rules:
            try:
                findings.extend(self._match_vulnerability(rule, file.filename, content))
            except Exception as e:
                logger.warning(f"Vulnerability rule {rule.name!r} failed on {file.filename}: {e}")

        findings.extend(self._contextual_checks(file.filename, content))
        return findings

    def _match_secret(self, rule: SecretRule, filename: str, content: str) -> list[SecurityFinding]:
        return [
            SecurityFinding(
                file=filename,
                line=line_number(content, match.start()),
                severity=rule.severity,
                rule=rule.name,
                kind="secret",
                match=redact_secret(match.group(0)),
                message=f"Potential {rule.name} exposed",
                suggestion="Remove sensitive data and use environment variables",
            )
            for match in rule.pattern.finditer(content)
        ]

    def _match_vulnerability(
        self, rule: VulnerabilityRule, filename: str, content: str
    ) -> list[SecurityFinding]:
        return [
            SecurityFinding(
                file=filename,
                line=line_number(content, match.start()),
                severity=rule.severity,
                rule=rule.name,
                kind="vulnerability",
                description=rule.description,
                message=f"{rule.description} detected",
                suggestion=get_vulnerability_suggestion(rule.name),
            )
            for match in rule.pattern.finditer(content)
        ]

    def _contextual_checks(self, filename: str, content: str) -> list[SecurityFinding]:
        findings = []
        lowered = filename.lower()

        if WEAK_RANDOM.search(content) and any(part in lowered for part in SENSITIVE_FILENAME_PARTS):
            findings.append(SecurityFinding(
                file=filename,
                severity=SecuritySeverity.HIGH,
                rule="Weak Random Number Generation",
                kind="vulnerability",
                message="Non-cryptographic random number generator used in a security-sensitive file",
                suggestion="Use crypto.randomBytes(), the secrets module or a similar secure source",
            ))

        if DISABLED_SECURITY.search(content):
            findings.append(SecurityFinding(
                file=filename,
                severity=SecuritySeverity.MEDIUM,
                rule="Disabled Security Feature",
                kind="configuration",
                message="Security feature appears to be disabled",
                suggestion="Enable security features unless specifically required",
            ))

        if DANGEROUS_EVAL.search(content):
            findings.append(SecurityFinding(
                file=filename,
                severity=SecuritySeverity.HIGH,
                rule="Dangerous Function Usage",
                kind="vulnerability",
                message="Usage of eval() or Function constructor detected",
                suggestion="Avoid eval() and Function constructor for security",
            ))

        return findings
