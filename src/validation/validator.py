"""
Two-Stage Draft Validation

Validation happens in two distinct stages before a draft is shown for review:

STAGE 1 - COMPLETENESS:
- Amount present (an expense needs one)
- Merchant present (an expense needs one)
- Parser confidence above the warning threshold

STAGE 2 - PLAUSIBILITY:
- Absurdly high or suspiciously low amounts
- Merchant made of digits and symbols only

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the user fixes them on the review surface.
"""

from decimal import Decimal
from typing import Optional

from src.config import AppSettings, get_settings
from src.models.expense import ParsedSpend, ValidationIssue, ValidationResult


class DraftValidator:
    """
    Validates a ParsedSpend draft through a two-stage pipeline.

    Stage 2 only runs when stage 1 found no errors.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_completeness(
        self,
        parsed: ParsedSpend,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: fields the expense record requires.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if parsed.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="No amount was recognized",
                severity="error",
                suggested_fix="Say or type the amount, e.g. '1200 baht'",
            ))

        if not parsed.merchant:
            issues.append(ValidationIssue(
                field="merchant",
                issue_type="missing",
                message="No merchant was recognized",
                severity="error",
                suggested_fix="Enter where the money was spent",
            ))

        if parsed.confidence < self._settings.min_draft_confidence:
            issues.append(ValidationIssue(
                field="confidence",
                issue_type="low_confidence",
                message=f"Parse confidence is low ({parsed.confidence:.0%})",
                severity="warning",
                suggested_fix="Please review all fields carefully",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_plausibility(
        self,
        parsed: ParsedSpend,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: values that are present but look wrong.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        currency = parsed.currency.value if parsed.currency else ""

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if parsed.amount is not None and parsed.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({parsed.amount:,.2f} {currency}) seems unusually high",
                severity="warning",
                suggested_fix="Check that a thousands separator was not misheard",
            ))

        if parsed.amount is not None and parsed.amount < Decimal("1"):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({parsed.amount} {currency}) seems unusually low",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if parsed.merchant:
            name = parsed.merchant
            alpha_count = sum(1 for c in name if c.isalpha())
            if alpha_count / len(name) < 0.3:
                issues.append(ValidationIssue(
                    field="merchant",
                    issue_type="suspicious_value",
                    message="Merchant looks unusual (too many numbers/symbols)",
                    severity="warning",
                    suggested_fix="Please verify the merchant name",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(self, parsed: ParsedSpend) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        completeness_valid, completeness_issues = self._validate_completeness(parsed)
        all_issues.extend(completeness_issues)

        plausibility_valid = False
        if completeness_valid:
            plausibility_valid, plausibility_issues = self._validate_plausibility(parsed)
            all_issues.extend(plausibility_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            completeness_valid=completeness_valid,
            plausibility_valid=plausibility_valid,
            is_valid=completeness_valid and plausibility_valid,
            # Same gate as the preview: something the user can start from
            can_proceed_with_review=parsed.has_preview_fields,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-text summary shown above the draft form."""
        if result.is_valid and not result.warnings:
            return "✅ Looks good! Please review the details below."

        lines = []

        if not result.completeness_valid:
            lines.append("❌ Some details could not be recognized:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        lines.append("")
        if result.can_proceed_with_review:
            lines.append("Fill in anything missing before saving.")
        else:
            lines.append("Nothing usable was recognized. Please try again.")

        return "\n".join(lines).strip()
