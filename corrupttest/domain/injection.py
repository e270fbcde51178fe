"""
Injection kinds understood by the corruptMutations failpoint.

Injections are assumed not to corrupt table ids; otherwise DROP TABLE could
leave corrupted data behind and affect the following tables.
"""

AVAILABLE_INJECTIONS: tuple[str, ...] = (
    "extraIndex",
    "missingIndex",
    "corruptIndexKey",
    "corruptIndexValue",
)


def injection_directive(injection: str, first_application_only: bool = False) -> str:
    """
    Build the failpoint directive for an injection.

    With first_application_only the directive is prefixed with "1*" so the
    target corrupts only the next triggered mutation. Workloads that write
    twice in one transaction need this: the untouched write is the control
    that makes a missing or extra index entry detectable.
    """
    directive = f'return("{injection}")'
    if first_application_only:
        return f"1*{directive}"
    return directive
