"""Standard audit testing tick marks used in general workpapers."""

from typing import List, Optional, Tuple

from ..models.catalog import TickMark

TICK_MARKS: Tuple[TickMark, ...] = (
    TickMark("A", "Valid signed contract verification", "Contract Management"),
    TickMark("B", "Service Provisioning Form (SPF) authorization check", "Authorization"),
    TickMark("C", "Legitimate order review and validation", "Order Processing"),
    TickMark("D", "Cut-off testing for period-end transactions", "Period Validation"),
    TickMark("E", "Service specification verification against delivery", "Service Delivery"),
    TickMark("F", "System log validation and audit trail review", "System Controls"),
    TickMark("G", "Invoice recomputation and mathematical accuracy check", "Financial Accuracy"),
    TickMark("H", "Walk-through testing of process flow", "Process Controls"),
    TickMark("I", "IFRS 15 revenue recognition compliance testing", "Compliance"),
    TickMark("J", "Vouching to supporting documentation", "Evidence Verification"),
    TickMark("K", "Contract terms and conditions compliance review", "Contract Management"),
    TickMark("L", "Payment status and collection verification", "Financial Accuracy"),
    TickMark("M", "Credit notes evaluation and authorization", "Adjustments"),
    TickMark("N", "Credit notes VAT impact assessment", "Tax Compliance"),
    TickMark("O", "Segregation of duties verification", "Access Controls"),
    TickMark("P", "Approval and authorization workflow validation", "Authorization"),
    TickMark("Q", "Reconciliation to general ledger", "Financial Accuracy"),
    TickMark("R", "Recalculation of amounts and rates", "Financial Accuracy"),
    TickMark("S", "Sample selection for testing", "Sampling"),
    TickMark("T", "Tracing transaction from source to final record", "Transaction Flow"),
    TickMark("U", "Unusual or exceptional items investigation", "Exception Testing"),
    TickMark("V", "Verification with third-party confirmation", "External Verification"),
    TickMark("W", "Withholding tax calculation verification", "Tax Compliance"),
    TickMark("X", "Cross-reference to other audit evidence", "Evidence Verification"),
    TickMark("Y", "Year-over-year comparison and trend analysis", "Analytical Review"),
    TickMark("Z", "Zero balance or null transaction verification", "Data Validation"),
)

DEFAULT_REVENUE_TICK_MARKS = ["A", "B", "C", "D", "E", "F", "G", "H", "I", "K", "L", "M", "N"]
DEFAULT_EXPENDITURE_TICK_MARKS = ["A", "B", "F", "G", "J", "O", "P", "Q", "R"]
DEFAULT_FINANCIAL_TICK_MARKS = ["G", "J", "Q", "R", "T", "V"]


def get_tick_mark_by_code(code: str) -> Optional[TickMark]:
    for tick_mark in TICK_MARKS:
        if tick_mark.code == code:
            return tick_mark
    return None


def get_tick_marks_by_category(category: str) -> List[TickMark]:
    return [tm for tm in TICK_MARKS if tm.category == category]


def get_tick_mark_categories() -> List[str]:
    return sorted({tm.category or "Other" for tm in TICK_MARKS})


def get_tick_marks_by_codes(codes: List[str]) -> List[TickMark]:
    """Resolve codes in the given order, skipping unknown ones."""
    resolved = (get_tick_mark_by_code(code) for code in codes)
    return [tm for tm in resolved if tm is not None]
