from code_companion.models.findings import FileUnderReview
from code_companion.models.severity import ReviewLevel


SYSTEM_PROMPT = """You are an expert code reviewer. Analyze the code changes and provide:
1. Specific, actionable feedback
2. Security vulnerabilities
3. Performance issues
4. Code quality improvements
5. Best practice violations

Return ONLY valid JSON in this exact format:
{
  "comments": [
    {
      "line": <line number within the patch, the first line of the patch is 1>,
      "body": "<comment text>",
      "severity": "error|warning|info",
      "category": "bug|security|performance|style|bestpractice"
    }
  ],
  "issues": [
    {
      "type": "bug|security|performance|style|bestpractice",
      "description": "<issue description>",
      "suggestion": "<how to fix>"
    }
  ]
}

If the change looks good, return empty "comments" and "issues" arrays."""


LEVEL_INSTRUCTIONS = {
    ReviewLevel.LIGHT: "Focus only on critical bugs and security issues",
    ReviewLevel.STANDARD: "Review for bugs, security, performance, and major code quality issues",
    ReviewLevel.STRICT: "Comprehensive review including style, naming, documentation, and all best practices",
}


USER_PROMPT = """Review Level: {level}
Instructions: {instructions}

File: {filename}
Status: {status}
Additions: {additions}
Deletions: {deletions}

Code Patch:
```diff
{patch}
```

Analyze this code change and provide feedback."""


def build_analysis_prompt(file: FileUnderReview, level: ReviewLevel) -> str:
    """Build the per-file user prompt for the given review level."""
    return USER_PROMPT.format(
        level=level.value,
        instructions=LEVEL_INSTRUCTIONS[level],
        filename=file.filename,
        status=file.status,
        additions=file.additions,
        deletions=file.deletions,
        patch=file.patch or "",
    )
