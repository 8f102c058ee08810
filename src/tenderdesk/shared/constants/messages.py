"""
User-facing notification messages.

Wording matches what dashboard users already see; tests assert on these
exact strings.
"""


class Messages:
    """Success and failure notifications emitted by feature mutations."""

    BID_RESULT_ADDED = "Bid opening result added successfully"
    BID_RESULT_DELETED = "Bid opening result deleted"

    CATEGORY_CREATED = "Category created successfully"
    CATEGORY_DELETED = "Category deleted successfully"

    COMPETITOR_ADDED = "Competitor added successfully"
    COMPETITOR_UPDATED = "Competitor updated successfully"
    COMPETITOR_DELETED = "Competitor deleted successfully"
    COMPETITIVE_BID_ADDED = "Competitive bid added"

    ANALYSIS_COMPLETE = "AI Analysis complete!"
    ANALYSIS_FAILED = "Failed to analyze tender"

    ORGANIZATION_CREATED = "Organization created successfully"
    ORGANIZATION_UPDATED = "Organization updated successfully"
    ORGANIZATION_DELETED = "Organization deleted successfully"

    PROCUREMENT_PLAN_ADDED = "Procurement plan added successfully"
    PROCUREMENT_PLAN_DELETED = "Procurement plan deleted successfully"
    PROCUREMENT_PLAN_PARSE_FAILED = "Failed to parse procurement plan"

    PROPOSAL_GENERATED = "Proposal generated successfully"
    PROPOSAL_FAILED = "Failed to generate proposal"

    SAMPLE_DATA_LOADED = "Sample data loaded successfully!"
    SAMPLE_DATA_FAILED = "Failed to load sample data. Please try again."

    EXPORTED_CSV = "Tenders exported to CSV successfully"
    EXPORTED_EXCEL = "Tenders exported for Excel successfully"
    EXPORT_FAILED = "Failed to export tenders. Please try again."

    REMINDER_CREATED = "Reminder created successfully"
    REMINDER_DELETED = "Reminder deleted successfully"
    REMINDERS_CLEARED = "Pending reminders cleared"
    NO_REMINDERS_TO_SCHEDULE = "No new reminders to schedule"
    NO_REMINDERS_TO_SEND = "No pending reminders to send"

    TENDER_CREATED = "Tender created successfully"
    TENDER_UPDATED = "Tender updated successfully"
    TENDER_DELETED = "Tender deleted successfully"

    TEST_MESSAGE_SENT = "Test message sent"

    @staticmethod
    def plural(count: int, noun: str) -> str:
        """Render ``count`` with ``noun`` pluralized by a trailing ``s``."""
        return f"{count} {noun}{'s' if count != 1 else ''}"

    @staticmethod
    def reminders_scheduled(count: int) -> str:
        return f"{Messages.plural(count, 'reminder')} scheduled"

    @staticmethod
    def reminders_sent(count: int) -> str:
        return f"{Messages.plural(count, 'reminder')} sent"

    @staticmethod
    def procurement_plan_parsed(count: int) -> str:
        return f"Parsed {count} {'opportunity' if count == 1 else 'opportunities'} from PDF."

    @staticmethod
    def proposal_credits_left(count: int) -> str:
        return f"Proposal generated. {Messages.plural(count, 'AI credit')} left"

    @staticmethod
    def organization_has_tenders(count: int) -> str:
        return (
            f"Cannot delete this organization because it has "
            f"{count} associated tender{'s' if count != 1 else ''}. "
            "Please delete or reassign the tenders first."
        )

    @staticmethod
    def competitor_has_bids(count: int) -> str:
        return (
            f"Cannot delete this competitor because they have "
            f"{count} recorded bid{'s' if count != 1 else ''}. "
            "Please delete the competitive bids first."
        )
