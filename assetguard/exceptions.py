class ContractViolation(ValueError):
    """Raised when snapshot or candidate data breaks the input contract.

    Business findings (unknown ids, double bookings, expired licenses) are
    never raised; they are reported as conflicts. This error is reserved for
    malformed input such as an unknown category/status value or an
    assignment whose return date precedes its assigned date.
    """
